from zbp.cli import main

main()

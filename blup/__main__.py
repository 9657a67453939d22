from blup.cli import main

main()

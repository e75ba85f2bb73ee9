from dolphin_parser.cli import main

main()

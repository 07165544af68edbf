from presalewatch.ui.cli import main

main()

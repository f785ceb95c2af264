from peekfm.app import main

main()

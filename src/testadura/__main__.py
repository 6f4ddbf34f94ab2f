from testadura import main

main()

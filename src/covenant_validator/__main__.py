from covenant_validator.cli import main

main()

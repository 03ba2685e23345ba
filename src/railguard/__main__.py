from railguard.cli.main import main

main()

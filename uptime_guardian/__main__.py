from uptime_guardian.server import main


if __name__ == "__main__":
    main()

from rpi_timelapse.cli.snapshot import main

if __name__ == "__main__":
    raise SystemExit(main())

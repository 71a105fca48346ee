from b3scraper.main import main

if __name__ == "__main__":
    main()

"""Main entry point for the token pair generator."""

if __name__ == "__main__":
    import sys
    from python_tokenpair.cli import main
    
    sys.exit(main())

"""Command line tools: the web server and sample data seeding."""

"""Static canon tables used to seed the book catalog."""

"""Free lectures for your class, in the terminal."""

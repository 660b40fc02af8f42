"""pygame front end: window, audio and keyboard input."""

"""CHIP-8 virtual machine with a pygame front end."""

__version__ = "1.0.0"

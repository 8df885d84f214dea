"""Task manager HTTP backend."""

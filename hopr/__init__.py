"""Next.js App Router to TanStack Start migration tool."""

__version__ = "0.1.0"

__all__ = ["__version__"]

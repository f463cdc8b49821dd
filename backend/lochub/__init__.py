"""lochub: per-language line counts for GitHub repositories, behind GitHub OAuth."""

__version__ = "0.1.0"

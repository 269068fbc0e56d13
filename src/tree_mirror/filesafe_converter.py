"""Filesafe path segments from Notion page titles.

Titles become directory names, so they must not contain characters that
Windows, macOS or Linux refuse in a path component. Conversion is
deliberately lossy and carries no uniqueness guarantee; two titles can map to
the same segment (see TreeDiscoverer for the collision policy).
"""

import re


class FilesafeConverter:
    """Converts Notion page titles to filesafe directory names.

    Conversion rules, applied in order:
    - Each of < > : " / \\ | ? * → hyphen (-)
    - Any run of whitespace → a single space
    - Leading/trailing whitespace → trimmed
    - Case, spaces and all other characters are preserved

    Examples:
        - "Report/Q1" → "Report-Q1"
        - "Why?  Because" → "Why- Because"
        - "   " → ""
    """

    ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*]')
    WHITESPACE_RUN = re.compile(r'\s+')

    # Used on disk in place of a segment that sanitized to nothing
    EMPTY_SEGMENT = "Untitled"

    @classmethod
    def sanitize(cls, title: str) -> str:
        """Convert a page title to a filesafe path segment.

        The result is a pure function of the input and sanitize(sanitize(x))
        equals sanitize(x). An empty or whitespace-only title gives "".

        Args:
            title: The Notion page title

        Returns:
            The sanitized segment (no extension)

        Examples:
            >>> FilesafeConverter.sanitize('Report: "Q1"')
            'Report- -Q1-'
            >>> FilesafeConverter.sanitize("  Meeting \\t notes ")
            'Meeting notes'
        """
        segment = cls.ILLEGAL_CHARS.sub('-', title)
        segment = cls.WHITESPACE_RUN.sub(' ', segment)
        return segment.strip()

    @classmethod
    def to_disk_segment(cls, segment: str) -> str:
        """Map a sanitized segment to the directory name actually created.

        sanitize() leaves two inputs that cannot be used as a directory name
        as-is: the empty string (would collapse into the parent directory)
        and dot-only names such as "." or ".." (would point at the current
        or parent directory).

        Examples:
            >>> FilesafeConverter.to_disk_segment("")
            'Untitled'
            >>> FilesafeConverter.to_disk_segment("..")
            '--'
            >>> FilesafeConverter.to_disk_segment("v1.2")
            'v1.2'
        """
        if not segment:
            return cls.EMPTY_SEGMENT
        if set(segment) == {'.'}:
            return '-' * len(segment)
        return segment

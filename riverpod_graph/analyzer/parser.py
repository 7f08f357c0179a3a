"""Tree-sitter parser for the analyzed Python sources."""
from pathlib import Path
from typing import Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_python as tspython


class LanguageParser:
    """Python parser using the tree-sitter v0.22+ API."""

    SUPPORTED_LANGUAGES = {
        '.py': 'python',
    }

    def __init__(self, language: str = 'python'):
        """Initialize parser for the given language.

        Args:
            language: Only 'python' is supported

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Factory method using tree-sitter v0.25+ API.

        Returns:
            Configured Parser instance

        Raises:
            ValueError: If language is not supported
        """
        if self.language != 'python':
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(Language(tspython.language()))

    def parse_source(self, source_code: bytes) -> Tree:
        """Parse in-memory source code."""
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    def parse_file(self, file_path: str | Path) -> Optional[Tree]:
        """Parse file and return tree-sitter Tree.

        Args:
            file_path: Path to source file to parse

        Returns:
            Parsed Tree object, or None if the file cannot be read
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            return None

        try:
            with open(file_path, 'rb') as f:
                source_code = f.read()
            source_code.decode('utf-8')
        except (UnicodeDecodeError, OSError):
            # Skip binary files or unreadable files
            return None

        return self.parser.parse(source_code)

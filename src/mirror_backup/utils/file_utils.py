"""File utility functions."""

from pathlib import Path
from typing import Union


class FileHelper:
    """Helper class for file operations."""
    
    @staticmethod
    def format_file_size(size_bytes: int) -> str:
        """Format file size in human readable format.
        
        Args:
            size_bytes: Size in bytes
            
        Returns:
            Formatted size string
        """
        if size_bytes == 0:
            return "0 B"
        
        size_names = ["B", "KB", "MB", "GB", "TB", "PB"]
        i = 0
        
        while size_bytes >= 1024 and i < len(size_names) - 1:
            size_bytes /= 1024.0
            i += 1
        
        return f"{size_bytes:.1f} {size_names[i]}"
    
    @staticmethod
    def is_within(path: Union[str, Path], root: Union[str, Path]) -> bool:
        """Return whether ``path`` is at or under ``root`` after resolution.
        
        Args:
            path: Path to check
            root: Candidate ancestor
            
        Returns:
            True if path equals root or lies beneath it
        """
        resolved = Path(path).expanduser().resolve()
        try:
            resolved.relative_to(Path(root).expanduser().resolve())
            return True
        except ValueError:
            return False

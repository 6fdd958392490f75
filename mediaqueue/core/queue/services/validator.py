"""
Candidate file validation.

Single Responsibility: decides whether a file may enter the queue.
"""
from typing import Iterable, List, Tuple
import logging

from ..models import CandidateFile


class FileValidator:
    """
    Validates candidate files before they enter the queue.
    
    A file is accepted if its extension is allowed OR its declared MIME
    type is allowed, so a file without a MIME type but with a correct
    extension still passes.
    """
    
    def __init__(self, allowed_extensions: Iterable[str], allowed_mime_types: Iterable[str]):
        """
        Initialize validator.
        
        Args:
            allowed_extensions: Extensions with leading dot, compared lowercase
            allowed_mime_types: MIME types, compared lowercase
        """
        self._extensions = frozenset(e.lower() for e in allowed_extensions)
        self._mime_types = frozenset(m.lower() for m in allowed_mime_types)
        self._logger = logging.getLogger('mediaqueue.queue.validator')
    
    def is_valid(self, candidate: CandidateFile) -> bool:
        """Returns True if extension or MIME type is allowed."""
        if candidate.extension and candidate.extension in self._extensions:
            return True
        return bool(candidate.mime_type) and candidate.mime_type.lower() in self._mime_types
    
    def filter_files(
        self,
        candidates: Iterable[CandidateFile]
    ) -> Tuple[List[CandidateFile], List[CandidateFile]]:
        """
        Partition candidates into accepted and rejected files.
        
        Args:
            candidates: Files offered to the queue
            
        Returns:
            Tuple of (valid, invalid), each in input order
        """
        valid: List[CandidateFile] = []
        invalid: List[CandidateFile] = []
        
        for candidate in candidates:
            if self.is_valid(candidate):
                valid.append(candidate)
            else:
                self._logger.debug(
                    f"Rejected {candidate.name} (ext={candidate.extension or '-'}, "
                    f"type={candidate.mime_type or '-'})"
                )
                invalid.append(candidate)
        
        return valid, invalid

"""Exception hierarchy for phyloXML parsing.

Every error raised by the tree construction state machine derives from
``PhyloXMLError``. Errors raised by the underlying XML tokenizer
(``lxml.etree.XMLSyntaxError``) are not wrapped and propagate unchanged.
"""

from typing import Any, List, Optional


class PhyloXMLError(Exception):
    """Base exception for phyloXML parsing failures.

    Attributes:
        message: Human readable description of the failure
        element: Name of the element being processed when the error occurred
        path: Slash separated tag ancestry at the point of failure
        phylogenies: Trees completed in the same document before the failure
    """

    def __init__(
        self,
        message: str,
        element: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.element = element
        self.path = path
        self.phylogenies: List[Any] = []

    def annotate(self, element: Optional[str], path: Optional[str]) -> "PhyloXMLError":
        """Attach element context if the error does not carry any yet."""
        if self.element is None:
            self.element = element
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.element:
            parts.append(f"element <{self.element}>")
        if self.path:
            parts.append(f"at /{self.path}")
        return ", ".join(parts)


class StructuralViolationError(PhyloXMLError):
    """An element appeared in a context the phyloXML structure forbids."""


class StackDisciplineError(StructuralViolationError):
    """A context stack was popped or peeked while empty, or tags mismatched."""


class UnbalancedTreeError(PhyloXMLError):
    """A tree or document ended while construction state was still open."""


class MalformedScalarError(PhyloXMLError, ValueError):
    """Attribute or text content could not be coerced to its target type.

    Attributes:
        text: The raw offending text
        field: Name of the field being populated
        target_type: Name of the type the text was coerced to
    """

    def __init__(self, text: str, field: str, target_type: str) -> None:
        super().__init__(
            f"could not parse {target_type} for '{field}' from '{text}'"
        )
        self.text = text
        self.field = field
        self.target_type = target_type


class EmptyDocumentError(PhyloXMLError):
    """The phyloXML source holds no content."""

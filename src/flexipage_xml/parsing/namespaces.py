"""Per-document namespace resolution with synthesized bindings.

Flexipage sources use component prefixes such as ``sfa:`` without declaring
them. Instead of failing on an unbound prefix, :class:`NamespaceContext`
binds it to ``urn:<authority>:<prefix>`` for the rest of the document.
"""

from typing import Dict, List, Optional, Tuple

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def split_qname(qname: str) -> Tuple[Optional[str], str]:
    """Split ``prefix:local`` into its parts; prefix is None when absent."""
    prefix, sep, local = qname.partition(":")
    if not sep:
        return None, qname
    return prefix, local


class NamespaceContext:
    """Scoped ``xmlns`` declarations plus document-wide synthesized bindings.

    One instance belongs to exactly one parse invocation.
    """

    def __init__(self, authority: str) -> None:
        self.authority = authority
        self._scopes: List[Dict[Optional[str], str]] = [{"xml": XML_NAMESPACE}]
        self._synthesized: Dict[str, str] = {}

    @property
    def depth(self) -> int:
        """Number of open element scopes."""
        return len(self._scopes) - 1

    @property
    def synthesized(self) -> Dict[str, str]:
        """Prefixes bound by synthesis so far (copy)."""
        return dict(self._synthesized)

    def push(self, declarations: Dict[Optional[str], str]) -> None:
        """Open an element scope with its ``xmlns`` declarations."""
        self._scopes.append(dict(declarations))

    def pop(self) -> Dict[Optional[str], str]:
        if len(self._scopes) == 1:
            raise IndexError("No open namespace scope to close")
        return self._scopes.pop()

    def declared_uri(self, prefix: Optional[str]) -> Optional[str]:
        """Return the innermost explicitly declared URI for ``prefix``."""
        for scope in reversed(self._scopes):
            if prefix in scope:
                return scope[prefix]
        return None

    def synthesize(self, prefix: str) -> str:
        """Return the synthesized URI for ``prefix``, creating it once."""
        uri = self._synthesized.get(prefix)
        if uri is None:
            uri = f"urn:{self.authority}:{prefix}"
            self._synthesized[prefix] = uri
        return uri

    def resolve(self, prefix: Optional[str]) -> str:
        """Resolve a prefix to a namespace URI; never fails.

        The default namespace resolves to ``""`` when undeclared. An unbound
        (or emptily declared) named prefix gets a synthesized URI.
        """
        uri = self.declared_uri(prefix)
        if prefix is None:
            return uri or ""
        if uri:
            return uri
        return self.synthesize(prefix)

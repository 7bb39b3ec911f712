"""Tests for per-document namespace resolution."""

import pytest

from flexipage_xml.parsing.namespaces import XML_NAMESPACE, NamespaceContext, split_qname


class TestSplitQName:
    def test_prefixed(self):
        assert split_qname("sfa:chart") == ("sfa", "chart")

    def test_unprefixed(self):
        assert split_qname("region") == (None, "region")


class TestNamespaceContext:
    """Test scoped declarations and synthesized bindings."""

    def test_default_namespace_undeclared(self):
        context = NamespaceContext("salesforce")
        assert context.resolve(None) == ""

    def test_default_namespace_declared(self):
        context = NamespaceContext("salesforce")
        context.push({None: "urn:default"})
        assert context.resolve(None) == "urn:default"

    def test_xml_prefix_is_always_bound(self):
        context = NamespaceContext("salesforce")
        assert context.resolve("xml") == XML_NAMESPACE
        assert context.synthesized == {}

    def test_unbound_prefix_is_synthesized(self):
        context = NamespaceContext("salesforce")
        assert context.resolve("sfa") == "urn:salesforce:sfa"
        assert context.synthesized == {"sfa": "urn:salesforce:sfa"}

    def test_synthesized_uri_is_cached(self):
        context = NamespaceContext("salesforce")
        first = context.resolve("sfa")
        context.push({})
        second = context.resolve("sfa")
        assert first is second

    def test_declared_prefix_wins(self):
        context = NamespaceContext("salesforce")
        context.push({"sfa": "urn:declared"})
        assert context.resolve("sfa") == "urn:declared"
        assert context.synthesized == {}

    def test_declaration_goes_out_of_scope(self):
        context = NamespaceContext("salesforce")
        context.push({"p": "urn:p"})
        assert context.resolve("p") == "urn:p"
        context.pop()
        assert context.resolve("p") == "urn:salesforce:p"

    def test_synthesized_binding_outlives_scope(self):
        context = NamespaceContext("salesforce")
        context.push({})
        uri = context.resolve("sfa")
        context.pop()
        assert context.resolve("sfa") is uri

    def test_empty_prefix_declaration_is_unbound(self):
        context = NamespaceContext("acme")
        context.push({"p": ""})
        assert context.resolve("p") == "urn:acme:p"

    def test_pop_without_scope(self):
        context = NamespaceContext("salesforce")
        with pytest.raises(IndexError):
            context.pop()

    def test_depth(self):
        context = NamespaceContext("salesforce")
        assert context.depth == 0
        context.push({})
        context.push({})
        assert context.depth == 2

    def test_contexts_are_independent(self):
        first = NamespaceContext("salesforce")
        first.resolve("sfa")
        second = NamespaceContext("salesforce")
        assert second.synthesized == {}

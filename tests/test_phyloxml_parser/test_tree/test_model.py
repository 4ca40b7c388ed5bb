"""Tests for the phyloXML object model."""

import json
import math

from phyloxml_parser.tree import (
    BranchColor,
    Clade,
    Confidence,
    Phylogeny,
    ProteinDomain,
    Taxonomy,
)


def _sample_tree() -> Phylogeny:
    """Build ((A,B)AB,C)root by hand."""
    a, b, c = Clade(name="A"), Clade(name="B"), Clade(name="C")
    ab = Clade(name="AB", children=[a, b])
    root = Clade(name="root", children=[ab, c])
    return Phylogeny(name="sample", root=root)


class TestCladeNavigation:
    """Test clade traversal helpers."""

    def test_preorder(self):
        """Test iteration visits nodes in document order."""
        tree = _sample_tree()

        assert [c.name for c in tree.root.iter_clades()] == ["root", "AB", "A", "B", "C"]

    def test_is_leaf(self):
        """Test leaves have no children."""
        tree = _sample_tree()

        assert tree.find("A").is_leaf
        assert not tree.find("AB").is_leaf

    def test_leaves(self):
        """Test leaves are returned in order."""
        assert [c.name for c in _sample_tree().root.leaves()] == ["A", "B", "C"]

    def test_find(self):
        """Test finding clades by name."""
        tree = _sample_tree()

        assert tree.find("B").name == "B"
        assert tree.find("missing") is None

    def test_find_all(self):
        """Test finding every clade with a name."""
        root = Clade(children=[Clade(name="x"), Clade(children=[Clade(name="x")])])

        assert len(root.find_all("x")) == 2

    def test_deep_tree_iteration(self):
        """Test traversal does not recurse per level."""
        root = Clade(name="0")
        node = root
        for depth in range(1, 5000):
            child = Clade(name=str(depth))
            node.children = [child]
            node = child

        assert sum(1 for _ in root.iter_clades()) == 5000
        assert root.max_depth() == 4999

    def test_identity_equality(self):
        """Test clades compare by identity."""
        assert Clade(name="A") != Clade(name="A")


class TestPhylogenySummary:
    """Test tree level summaries."""

    def test_counts(self):
        """Test clade and leaf counts."""
        tree = _sample_tree()

        assert tree.clade_count == 5
        assert tree.leaf_count == 3
        assert tree.max_depth == 2

    def test_empty_phylogeny(self):
        """Test a phylogeny without root."""
        tree = Phylogeny()

        assert tree.clade_count == 0
        assert tree.leaf_count == 0
        assert tree.max_depth == 0
        assert tree.find("A") is None
        assert tree.find_all("A") == []


class TestToDict:
    """Test dictionary conversion."""

    def test_unset_fields_omitted(self):
        """Test None fields are left out."""
        assert Confidence(type="bootstrap", value=95.0).to_dict() == {
            "type": "bootstrap",
            "value": 95.0,
        }

    def test_nested_conversion(self):
        """Test nested entities and lists are converted."""
        clade = Clade(
            name="A",
            taxonomies=[Taxonomy(code="ECOLI", common_names=["E. coli"])],
            color=BranchColor(red=255, green=0, blue=0),
        )

        data = clade.to_dict()
        assert data["taxonomies"] == [{"code": "ECOLI", "common_names": ["E. coli"]}]
        assert data["color"] == {"red": 255, "green": 0, "blue": 0}

    def test_reserved_word_field_name(self):
        """Test from_ is emitted as from."""
        assert ProteinDomain(from_=1, to=10).to_dict() == {"from": 1, "to": 10}

    def test_non_finite_floats_are_json_safe(self):
        """Test INF and NaN become strings."""
        data = Clade(branch_length=math.inf, width=math.nan).to_dict()

        assert data == {"branch_length": "inf", "width": "nan"}
        json.dumps(data)

    def test_phylogeny_includes_root(self):
        """Test the root clade is part of the phylogeny dictionary."""
        data = _sample_tree().to_dict()

        assert data["name"] == "sample"
        assert data["root"]["children"][1] == {"name": "C"}

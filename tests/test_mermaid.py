"""Tests for Mermaid export."""

import pytest

from infradiagram.core.document import DiagramDocument
from infradiagram.core.schema import RelationshipType
from infradiagram.generators.mermaid import clean_label, generate_mermaid, node_id


@pytest.fixture
def document():
    document = DiagramDocument("prod network")
    vpc = document.create_component("VpcComponent", name="main")
    web = document.create_component("EC2InstanceComponent", name="web (primary)")
    db = document.create_component("EC2InstanceComponent", name="db")
    document.add_component(vpc)
    document.add_component(web, vpc.id)
    document.add_component(db, vpc.id)
    document.add_relationship(vpc.id, web.id, RelationshipType.CONTAINS)
    document.add_relationship(web.id, db.id, RelationshipType.DEPENDS_ON, "reads")
    document.add_relationship(web.id, db.id, RelationshipType.DEPENDS_ON, "reads")
    return document


class TestMermaid:
    """Tests for generate_mermaid."""

    def test_structure(self, document):
        """Test the flowchart layout."""
        output = generate_mermaid(document)

        assert output.startswith("# prod network")
        assert "```mermaid" in output
        assert "flowchart TB" in output
        assert output.count("subgraph") == 2
        assert output.count("end\n") >= 2

    def test_nodes(self, document):
        """Test node declarations and label cleaning."""
        web = document.region.children[0].children[0]

        output = generate_mermaid(document)

        assert f'{node_id(web.id)}["web primary"]' in output

    def test_relationship_arrows(self, document):
        """Test dependency arrows, deduplication and skipped containment."""
        web, db = document.region.children[0].children

        output = generate_mermaid(document)

        assert output.count(f"{node_id(web.id)} -.->|reads| {node_id(db.id)}") == 1
        assert "|contains|" not in output

    def test_dangling_relationship_skipped(self, document):
        """Test that relationships to missing components are not drawn."""
        data = document.to_dict()
        data["relationships"].append(
            {"id": "r", "sourceId": "ghost", "targetId": document.region.id, "type": "references"}
        )

        output = generate_mermaid(DiagramDocument.from_dict(data))

        assert "ghost" not in output

    def test_helpers(self):
        """Test id and label sanitizing."""
        assert node_id("ab-cd.ef") == "n_ab_cd_ef"
        assert clean_label('say "hi" [x]') == "say hi x"

"""Tests for diagram document editing."""

import itertools
import logging

import pytest

from infradiagram.core.components import Component
from infradiagram.core.config import DiagramConfig
from infradiagram.core.document import DiagramDocument
from infradiagram.core.errors import (
    DuplicateComponentError,
    EndpointNotFoundError,
    ParentNotFoundError,
)
from infradiagram.core.schema import MissingParentPolicy, RelationshipType


@pytest.fixture
def document():
    """Empty document named 'net'."""
    return DiagramDocument("net")


@pytest.fixture
def network(document):
    """
    Document with a VPC holding two subnets and an instance.

    region -> vpc -> (public -> web, private)
    """
    vpc = document.create_component("VpcComponent", name="main")
    public = document.create_component("SubnetComponent", name="public", isPublic=True)
    private = document.create_component("SubnetComponent", name="private")
    web = document.create_component("EC2InstanceComponent", name="web")
    document.add_component(vpc)
    document.add_component(public, vpc.id)
    document.add_component(private, vpc.id)
    document.add_component(web, public.id)
    return document


def by_name(document, name):
    return next(c for c in document.iter_components() if c.name == name)


class TestDocumentCreation:
    """Tests for new documents."""

    def test_new_document_has_region(self, document):
        """Test default region."""
        assert document.name == "net"
        assert document.region.type == "RegionComponent"
        assert document.region.attributes["regionName"] == "us-east-1"
        assert document.region.children == []
        assert document.relationships == []
        assert len(document) == 1

    def test_region_name(self):
        """Test explicit region name."""
        document = DiagramDocument("eu", "eu-central-1")

        assert document.region.attributes["regionName"] == "eu-central-1"

    def test_config_default_region(self):
        """Test region name from configuration."""
        document = DiagramDocument("ap", config=DiagramConfig(default_region="ap-south-1"))

        assert document.region.attributes["regionName"] == "ap-south-1"

    def test_injected_id_factory(self):
        """Test deterministic ids."""
        counter = itertools.count()
        document = DiagramDocument("net", id_factory=lambda: f"id-{next(counter)}")
        vpc = document.create_component("VpcComponent")

        assert document.id == "id-0"
        assert document.region.id == "id-1"
        assert vpc.id == "id-2"


class TestAddComponent:
    """Tests for add_component."""

    def test_nested_add(self, document):
        """Test adding under the region, then under a new container."""
        a = document.create_component("VpcComponent", name="A")
        b = document.create_component("SubnetComponent", name="B")

        document.add_component(a, parent_id=document.region.id)
        document.add_component(b, parent_id=a.id)

        assert document.find_component_by_id(b.id) is b
        assert document.to_dict()["region"]["children"][0]["children"][0]["id"] == b.id

    def test_add_without_parent_goes_to_region(self, document):
        """Test default placement."""
        igw = document.create_component("InternetGatewayComponent")

        placement = document.add_component(igw)

        assert document.region.children == [igw]
        assert placement.parent_id == document.region.id
        assert not placement.fell_back

    def test_inserted_as_last_child_of_parent_only(self, network):
        """Test that the component lands in exactly one place."""
        private = by_name(network, "private")
        rt = network.create_component("RouteTableComponent", name="rt")

        placement = network.add_component(rt, private.id)

        assert placement.parent_id == private.id
        assert private.children[-1] is rt
        holders = [
            c for c in network.iter_components() if c.is_container and any(x is rt for x in c.children)
        ]
        assert holders == [private]

    def test_missing_parent_falls_back_to_region(self, document, caplog):
        """Test the fallback policy and its observable error."""
        c = document.create_component("RouteTableComponent", name="C")

        with caplog.at_level(logging.WARNING):
            placement = document.add_component(c, parent_id="nonexistent")

        assert document.region.children[-1] is c
        assert placement.fell_back
        assert isinstance(placement.error, ParentNotFoundError)
        assert placement.error.parent_id == "nonexistent"
        assert placement.requested_parent_id == "nonexistent"
        assert placement.parent_id == document.region.id
        assert "nonexistent" in caplog.text

    def test_missing_parent_fail_policy(self):
        """Test the strict policy."""
        document = DiagramDocument(
            "net", config=DiagramConfig(missing_parent=MissingParentPolicy.FAIL)
        )
        c = document.create_component("RouteTableComponent")

        with pytest.raises(ParentNotFoundError):
            document.add_component(c, parent_id="nonexistent")

        assert c.id not in document
        assert document.region.children == []

    def test_leaf_is_not_a_parent(self, network):
        """Test that a leaf id does not count as a container."""
        web = by_name(network, "web")
        rt = network.create_component("RouteTableComponent")

        placement = network.add_component(rt, web.id)

        assert placement.fell_back
        assert network.parent_of(rt.id) is network.region

    def test_duplicate_add_rejected(self, network):
        """Test that a node is never duplicated."""
        web = by_name(network, "web")

        with pytest.raises(DuplicateComponentError):
            network.add_component(web, network.region.id)

        assert sum(1 for c in network.iter_components() if c.id == web.id) == 1

    def test_duplicate_descendant_rejected(self, network):
        """Test that ids inside an added subtree are checked too."""
        web = by_name(network, "web")
        vpc = network.create_component("VpcComponent")
        vpc.add_child(Component(web.id, "EC2InstanceComponent"))

        with pytest.raises(DuplicateComponentError):
            network.add_component(vpc)


class TestRemoveComponent:
    """Tests for remove_component."""

    def test_remove_leaf(self, network):
        """Test removing a nested leaf."""
        web = by_name(network, "web")

        removed = network.remove_component(web.id)

        assert removed is web
        assert network.find_component_by_id(web.id) is None
        assert by_name(network, "public").children == []

    def test_cascade_delete(self, document):
        """Test that relationships of a removed component are pruned."""
        a = document.create_component("VpcComponent", name="A")
        b = document.create_component("SubnetComponent", name="B")
        document.add_component(a)
        document.add_component(b, a.id)
        document.add_relationship(a.id, b.id, "depends_on")

        document.remove_component(a.id)

        assert len(document.relationships) == 0

    def test_cascade_covers_subtree(self, network):
        """Test that relationships of removed descendants are pruned too."""
        vpc = by_name(network, "main")
        web = by_name(network, "web")
        igw = network.create_component("InternetGatewayComponent", name="igw")
        network.add_component(igw)
        network.add_relationship(web.id, igw.id, RelationshipType.CONNECTS_TO)
        kept = network.add_relationship(igw.id, network.region.id, RelationshipType.REFERENCES)

        network.remove_component(vpc.id)

        assert network.relationships == [kept]
        assert all(not r.involves(web.id) for r in network.relationships)

    def test_remove_region_is_noop(self, network):
        """Test that the region cannot be removed."""
        before = network.to_dict()

        assert network.remove_component(network.region.id) is None
        assert network.to_dict() == before

    def test_remove_absent_is_noop(self, network):
        """Test that removing an unknown id does not raise."""
        before = network.to_dict()

        assert network.remove_component("missing") is None
        assert network.to_dict() == before

    def test_remove_prunes_dangling_relationships(self, network):
        """Test pruning of loaded relationships whose endpoint is already gone."""
        data = network.to_dict()
        data["relationships"].append(
            {"id": "r-ghost", "sourceId": "ghost", "targetId": network.region.id, "type": "references"}
        )
        loaded = DiagramDocument.from_dict(data)

        loaded.remove_component("ghost")

        assert loaded.get_relationship("r-ghost") is None


class TestFindComponent:
    """Tests for find_component_by_id."""

    def test_find_region(self, network):
        """Test that the root id returns the region itself."""
        assert network.find_component_by_id(network.region.id) is network.region

    def test_find_nested(self, network):
        """Test finding a deep descendant."""
        web = by_name(network, "web")

        assert network.find_component_by_id(web.id) is web

    def test_not_found_is_none(self, network):
        """Test the not-found signal."""
        assert network.find_component_by_id("missing") is None
        assert "missing" not in network

    def test_parent_of(self, network):
        """Test parent lookup."""
        assert network.parent_of(by_name(network, "web").id) is by_name(network, "public")
        assert network.parent_of(network.region.id) is None


class TestRelationships:
    """Tests for relationship editing."""

    def test_add_relationship(self, network):
        """Test creating a relationship."""
        web = by_name(network, "web")
        private = by_name(network, "private")

        rel = network.add_relationship(web.id, private.id, RelationshipType.CONNECTS_TO, "db traffic")

        assert network.relationships == [rel]
        assert rel.source_id == web.id
        assert rel.target_id == private.id
        assert rel.type == RelationshipType.CONNECTS_TO
        assert rel.label == "db traffic"
        assert rel.id

    def test_string_type(self, network):
        """Test that a string type is accepted."""
        web = by_name(network, "web")

        rel = network.add_relationship(web.id, network.region.id, "references")

        assert rel.type == RelationshipType.REFERENCES

    def test_missing_endpoint_creates_nothing(self, network):
        """Test relationship atomicity."""
        web = by_name(network, "web")
        network.add_relationship(web.id, network.region.id, "references")
        before = [r.to_dict() for r in network.relationships]

        with pytest.raises(EndpointNotFoundError) as exc_info:
            network.add_relationship(web.id, "missing", "depends_on")

        assert exc_info.value.missing == ["missing"]
        assert [r.to_dict() for r in network.relationships] == before

    def test_both_endpoints_missing(self, document):
        """Test that all missing endpoints are reported."""
        with pytest.raises(EndpointNotFoundError) as exc_info:
            document.add_relationship("a", "b", "depends_on")

        assert exc_info.value.missing == ["a", "b"]
        assert document.relationships == []

    def test_remove_relationship(self, network):
        """Test relationship removal."""
        web = by_name(network, "web")
        rel = network.add_relationship(web.id, network.region.id, "references")

        assert network.remove_relationship(rel.id)
        assert network.relationships == []
        assert not network.remove_relationship(rel.id)

    def test_relationships_for(self, network):
        """Test querying by endpoint."""
        web = by_name(network, "web")
        vpc = by_name(network, "main")
        first = network.add_relationship(web.id, vpc.id, "depends_on")
        second = network.add_relationship(vpc.id, network.region.id, "references")

        assert network.relationships_for(web.id) == [first]
        assert network.relationships_for(vpc.id) == [first, second]


class TestSourceFiles:
    """Tests for provenance."""

    def test_set_source_files(self, document):
        """Test provenance is stored without checks."""
        document.set_source_files("/work/infra", ["main.tf", "does-not-exist.tf"])

        assert document.source_files.root_folder == "/work/infra"
        assert document.to_dict()["sourceFiles"] == {
            "rootFolder": "/work/infra",
            "files": ["main.tf", "does-not-exist.tf"],
        }

    def test_optional_keys_absent(self, document):
        """Test that unset provenance is left out of the record."""
        data = document.to_dict()

        assert set(data) == {"id", "name", "region", "relationships"}

from genealogia.models import Person
from genealogia.services import FamilyDataParser
from genealogia.services.classifier import TreeCategory
from genealogia.services.grouping import group_tree, group_report


def test_spouse_layer_comes_before_children(principal):
    relatives = [
        Person(id="c1", name="Carlos", relationship="Hijo/Hija"),
        Person(id="s1", name="María", relationship="Cónyuge/Pareja"),
        Person(id="c2", name="Ana", relationship="Hijo/Hija"),
    ]
    layers = group_tree(principal, relatives)

    assert [layer.name for layer in layers] == ["Principal", "Cónyuge/Pareja", "Hijo/Hija"]
    assert [len(layer) for layer in layers] == [1, 1, 2]
    # input order is kept inside a layer
    assert [p.id for p in layers[2].members] == ["c1", "c2"]


def test_every_classified_person_lands_in_exactly_one_layer(principal, family):
    layers = group_tree(principal, family)

    ids = [p.id for layer in layers for p in layer.members]
    assert len(ids) == len(set(ids)) == len(family) + 1
    assert [layer.category for layer in layers] == list(TreeCategory)


def test_unclassified_relatives_are_dropped_from_tree(principal):
    relatives = [
        Person(name="Mateo", relationship="SOBRINO"),
        Person(name="Sin dato", relationship=""),
        Person(name="Luis", relationship="HERMANO"),
    ]
    layers = group_tree(principal, relatives)

    names = [p.name for layer in layers for p in layer.members]
    assert names == ["Juan Pérez", "Luis"]


def test_group_tree_without_relatives(principal):
    layers = group_tree(principal, [])
    assert len(layers) == 1
    assert layers[0].category is TreeCategory.PRINCIPAL


def test_report_branches_for_category_labels(principal, family):
    branches = group_report(principal, family)
    by_id = lambda people: {p.id for p in people}

    assert by_id(branches.direct) == {"f1", "f2", "f3", "f6"}
    assert by_id(branches.children) == {"f2", "f3"}
    # children are listed again in the paternal branch
    assert by_id(branches.paternal) == {"f2", "f3", "f4", "f5", "f7", "f8", "f9"}
    # the cousin has no surnames to compare, so it is extended and shown under maternal
    assert by_id(branches.extended) == {"f10"}
    assert by_id(branches.maternal) == {"f10"}


def test_report_branches_for_registry_payload(sample_payload):
    principal, relatives = FamilyDataParser.parse(sample_payload)
    branches = group_report(principal, relatives)
    names = lambda people: [p.name.split()[0] for p in people]

    assert names(branches.direct) == ["María", "Carlos", "Ana", "Luis"]
    assert names(branches.paternal) == ["Carlos", "Ana", "Pedro", "Javier", "Lucía"]
    # own maternal relatives first, then the unplaced ones
    assert names(branches.maternal) == ["Elena", "Rosa", "Roberto", "Mateo"]
    assert names(branches.extended) == ["Mateo"]


def test_every_relative_appears_in_some_branch(sample_payload):
    principal, relatives = FamilyDataParser.parse(sample_payload)
    branches = group_report(principal, relatives)

    shown = {p.id for p in branches.direct + branches.paternal + branches.maternal}
    assert shown == {p.id for p in relatives}
    assert len(branches.relatives) == len(relatives)


def test_branch_counts(principal, family):
    counts = group_report(principal, family).counts()
    assert counts == {"direct": 4, "paternal": 7, "maternal": 1}

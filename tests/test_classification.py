import pytest

from lpjdesa.core.errors import DomainValidationError, NotFoundError
from lpjdesa.schemas.schemas import ActivityRead, SubFieldRead
from lpjdesa.services.classification import DEFAULT_CATALOG, ClassificationTree


def _sub_field(id_, field_name, name, code=None):
    return SubFieldRead(id=id_, fiscal_year=2026, field_name=field_name, name=name, account_code=code)


@pytest.fixture
def tree():
    return ClassificationTree(
        DEFAULT_CATALOG,
        [
            _sub_field(1, "Pembangunan Desa", "Kesehatan", "2.3"),
            _sub_field(2, "Pembangunan Desa", "Pendidikan", "2.2"),
            _sub_field(3, "Pembangunan Desa", "Pekerjaan Umum", "2.10"),
            _sub_field(4, "Penanggulangan Bencana", "Tanggap Darurat", "5.1"),
        ],
    )


def test_catalog_fields_keep_catalog_order(tree):
    assert [field.name for field in tree.fields] == [
        "Penyelenggaraan Pemerintahan",
        "Pembangunan Desa",
        "Pembinaan Kemasyarakatan",
        "Pemberdayaan Masyarakat",
        "Penanggulangan Bencana",
    ]


def test_sub_fields_are_ordered_by_account_code(tree):
    names = [row.name for row in tree.list_sub_fields("Pembangunan Desa")]
    assert names == ["Pendidikan", "Kesehatan", "Pekerjaan Umum"]
    assert tree.list_sub_fields("Pembinaan Kemasyarakatan") == []


def test_unknown_field_and_sub_field(tree):
    with pytest.raises(NotFoundError):
        tree.list_sub_fields("Bidang Fiktif")
    with pytest.raises(NotFoundError):
        tree.get_sub_field(99)
    assert not tree.has_sub_field(99)


def test_sub_field_names_are_unique_per_field_ignoring_case(tree):
    with pytest.raises(DomainValidationError):
        tree.ensure_unique_name("Pembangunan Desa", "  kesehatan ")
    # Same name in another field is allowed.
    tree.ensure_unique_name("Penanggulangan Bencana", "Kesehatan")
    # Renaming a row to its own name is allowed.
    tree.ensure_unique_name("Pembangunan Desa", "Kesehatan", exclude_id=1)
    with pytest.raises(DomainValidationError):
        tree.ensure_unique_name("Pembangunan Desa", "   ")


def test_suggest_code_counts_existing_sub_fields(tree):
    assert tree.suggest_code("Pembangunan Desa") == "2.4"
    assert tree.suggest_code("Pemberdayaan Masyarakat") == "4.1"


def test_with_and_without_sub_field_return_new_trees(tree):
    added = tree.with_sub_field(_sub_field(5, "Pembangunan Desa", "Perhubungan", "2.4"))
    assert added.has_sub_field(5)
    assert not tree.has_sub_field(5)

    renamed = added.with_sub_field(_sub_field(5, "Pembangunan Desa", "Perhubungan Desa", "2.4"))
    assert renamed.get_sub_field(5).name == "Perhubungan Desa"
    assert len(renamed.list_sub_fields("Pembangunan Desa")) == 4

    removed = renamed.without_sub_field(5)
    assert removed == tree


def test_activity_context_falls_back_to_sub_field_code(tree):
    activity = ActivityRead(id=7, fiscal_year=2026, sub_field_id=2, name="Honor Guru PAUD")
    context = tree.activity_context(activity)
    assert context.field_name == "Pembangunan Desa"
    assert context.sub_field_name == "Pendidikan"
    assert context.account_code == "2.2"

    orphan = ActivityRead(id=8, fiscal_year=2026, sub_field_id=42, name="Tanpa Sub Bidang")
    assert tree.field_of(orphan) is None
    assert tree.activity_context(orphan).account_code == ""

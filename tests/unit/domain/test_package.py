"""Tests for pathmapper/domain/models/__init__.py: package exports."""

from pathmapper.domain.models import __all__ as domain_all
from pathmapper.domain.models import (
    # spot-check one import from each module
    PathPattern,
    QuerySpec,
    Record,
    Tracked,
)


def test_domain_models_exports_17_names():
    assert len(domain_all) == 17


def test_path_pattern_importable_from_package():
    assert PathPattern.__name__ == "PathPattern"


def test_query_spec_importable_from_package():
    assert QuerySpec.__name__ == "QuerySpec"


def test_record_importable_from_package():
    assert Record.__name__ == "Record"


def test_tracked_importable_from_package():
    assert Tracked.__name__ == "Tracked"


def test_exported_classes_are_documented():
    import inspect

    import pathmapper.domain.models as models

    undocumented = [
        name
        for name in domain_all
        if inspect.isclass(getattr(models, name)) and not getattr(models, name).__doc__
    ]
    assert undocumented == []

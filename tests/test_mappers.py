"""
Declared fault mappers (apifaults/mappers.py).
"""

import pytest

from apifaults import ApiFault, PipelineOptions, ProblemDescription
from apifaults.mappers import DomainFaultMapper, MapperBinding, MapperChain, maps


def retired(fault, options):
    return ProblemDescription(http_status=410, title="Parcel retired.", detail=fault.detail)


async def retired_async(fault, options):
    return ProblemDescription(http_status=410, title="Parcel retired (async).")


class TestMapperBinding:

    def test_name_from_transform(self):
        assert MapperBinding("ParcelRetired", retired).name == "retired"

    def test_decorator(self):
        @maps("ParcelRetired")
        def parcel_retired(fault, options):
            return ProblemDescription(http_status=410)

        assert isinstance(parcel_retired, MapperBinding)
        assert parcel_retired.category == "ParcelRetired"


class TestDomainFaultMapper:

    def test_handles_by_category(self):
        mapper = DomainFaultMapper(MapperBinding("ParcelRetired", retired))
        assert mapper.handles(ApiFault(category="ParcelRetired"))
        assert not mapper.handles(ApiFault(category="ParcelLocked"))

    def test_predicate_replaces_category(self):
        binding = MapperBinding("ParcelRetired", retired, when=lambda f: f.status == 410)
        mapper = DomainFaultMapper(binding)
        assert mapper.handles(ApiFault(category="Anything", status=410))
        assert not mapper.handles(ApiFault(category="ParcelRetired", status=400))

    @pytest.mark.asyncio
    async def test_sync_transform(self):
        mapper = DomainFaultMapper(MapperBinding("ParcelRetired", retired))
        problem = await mapper.map(ApiFault("gone", category="ParcelRetired"))
        assert problem.http_status == 410
        assert problem.detail == "gone"

    @pytest.mark.asyncio
    async def test_async_transform(self):
        mapper = DomainFaultMapper(MapperBinding("ParcelRetired", retired_async))
        problem = await mapper.map(ApiFault(category="ParcelRetired"))
        assert problem.title == "Parcel retired (async)."

    @pytest.mark.asyncio
    async def test_options_are_threaded_into_transform(self):
        seen = []

        def transform(fault, options):
            seen.append(options)
            return ProblemDescription()

        options = PipelineOptions(environment="dev")
        await DomainFaultMapper(MapperBinding("X", transform), options).map(ApiFault(category="X"))
        assert seen == [options]


class TestMapperChain:

    def test_matching_in_order(self):
        a = DomainFaultMapper(MapperBinding("ParcelRetired", retired))
        b = DomainFaultMapper(MapperBinding("ParcelLocked", retired))
        c = DomainFaultMapper(MapperBinding("Any", retired, when=lambda f: True))
        chain = MapperChain([a, b, c])
        assert chain.matching(ApiFault(category="ParcelRetired")) == [a, c]

    def test_duplicate_categories(self):
        chain = MapperChain(
            DomainFaultMapper(MapperBinding(category, retired))
            for category in ["A", "B", "A", "A", "C", "B"]
        )
        assert chain.duplicate_categories() == ["A", "B"]

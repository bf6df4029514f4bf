import pytest
from datetime import date, datetime
from showtime.app.schemas.catalog import Row
from showtime.app.schemas.schedules import DynamicRow, OperatingWindow, Override, ShowSource, StaticRow
from showtime.app.services.catalog import Catalog
from showtime.app.services.generator import CycleGenerator
from showtime.app.services.resolver import ShowResolver

DAY = date(2025, 8, 19)


@pytest.fixture
def catalog():
    catalog = Catalog()
    catalog.add_auditorium(name="Aud 1")
    catalog.add_auditorium(name="Aud 2")
    catalog.add_film("Thunder Road", id="F1", runtime_min=120, trailer_min=15, clean_min=15)
    catalog.add_film("Moon Harbor", id="F2", runtime_min=100, trailer_min=10, clean_min=15)
    return catalog

@pytest.fixture
def resolver(catalog):
    generator = CycleGenerator(catalog, OperatingWindow(first_hm="07:00", last_hm="23:00"), DAY)
    return ShowResolver(catalog, generator)

@pytest.fixture
def rows():
    return [Row(row_id="R1", booking_id="B1", film_id="F1", aud_id=1, prime_hm="19:00")]


class TestResolve:

    def test_without_overrides_matches_generation(self, resolver, rows):
        shows = resolver.resolve(rows, [], {}, set())
        assert [s.id for s in shows] == ["R1:-4", "R1:-3", "R1:-2", "R1:-1", "R1:0", "R1:1"]

    def test_hidden_shows_are_dropped(self, resolver, rows):
        shows = resolver.resolve(rows, [], {}, {"R1:0"})
        assert "R1:0" not in [s.id for s in shows]
        assert len(shows) == 5

    def test_start_override_recomputes_end(self, resolver, rows):
        overrides = {"R1:0": Override(start=datetime(2025, 8, 19, 19, 20))}
        show = [s for s in resolver.resolve(rows, [], overrides, set()) if s.id == "R1:0"][0]
        assert show.end == datetime(2025, 8, 19, 21, 35)
        assert show.source == ShowSource.PRIME
        assert show.row_ref == StaticRow(row_id="R1")

    def test_start_override_uses_effective_film_length(self, resolver, rows):
        overrides = {"R1:0": Override(start=datetime(2025, 8, 19, 19, 0), film_id="F2")}
        show = [s for s in resolver.resolve(rows, [], overrides, set()) if s.id == "R1:0"][0]
        assert show.film_id == "F2"
        assert show.end == datetime(2025, 8, 19, 20, 50)

    def test_results_are_sorted_by_start(self, resolver, rows):
        overrides = {"R1:-4": Override(start=datetime(2025, 8, 19, 22, 0))}
        shows = resolver.resolve(rows, [], overrides, set())
        starts = [s.start for s in shows]
        assert starts == sorted(starts)
        assert shows[-1].id == "R1:-4"

    def test_manual_shows_are_tagged(self, resolver, rows):
        generated = resolver.resolve(rows, [], {}, set())
        manual = generated[0].model_copy(update={
            "id": "M-1", "start": datetime(2025, 8, 19, 8, 0), "source": ShowSource.PRIME,
        })
        shows = resolver.resolve(rows, [manual], {}, set())
        assert [s for s in shows if s.id == "M-1"][0].source == ShowSource.MANUAL


class TestRegrouping:

    def test_auditorium_override_moves_show_to_dynamic_row(self, resolver, rows):
        overrides = {"R1:0": Override(aud_id=2)}
        show = [s for s in resolver.resolve(rows, [], overrides, set()) if s.id == "R1:0"][0]
        assert show.source == ShowSource.OVERRIDE
        assert show.aud_name == "Aud 2"
        assert show.row_ref == DynamicRow(aud_id=2, film_id="F1")
        assert show.row_id == "OV-2-F1"
        assert show.row_id != "R1"

    def test_same_destination_shares_row_key(self, resolver, rows):
        overrides = {"R1:0": Override(aud_id=2), "R1:1": Override(aud_id=2)}
        moved = [s for s in resolver.resolve(rows, [], overrides, set()) if s.source == ShowSource.OVERRIDE]
        assert len(moved) == 2
        assert len(set(s.row_id for s in moved)) == 1

    def test_override_to_base_values_keeps_static_row(self, resolver, rows):
        overrides = {"R1:0": Override(aud_id=1, film_id="F1")}
        show = [s for s in resolver.resolve(rows, [], overrides, set()) if s.id == "R1:0"][0]
        assert show.source == ShowSource.PRIME
        assert show.row_id == "R1"

    @pytest.mark.parametrize("override", [
        Override(start=datetime(2025, 8, 19, 19, 20)),
        Override(aud_id=2),
        Override(film_id="F2"),
        Override(start=datetime(2025, 8, 19, 18, 0), aud_id=2, film_id="F2"),
        Override(film_id="F404"),
    ])
    def test_override_is_idempotent(self, resolver, rows, override):
        base = resolver.base_show("R1:0", rows, [])
        once = resolver.apply_override(base, override)
        assert resolver.apply_override(once, override) == once


class TestDeduplication:

    def test_collision_keeps_first_encountered(self, resolver, rows):
        # Move the prime show onto the previous show's start
        overrides = {"R1:0": Override(start=datetime(2025, 8, 19, 16, 30))}
        shows = resolver.resolve(rows, [], overrides, set())
        at_1630 = [s for s in shows if s.start == datetime(2025, 8, 19, 16, 30)]
        assert [s.id for s in at_1630] == ["R1:-1"]

    def test_no_duplicate_triples(self, resolver, rows):
        rows = rows + [Row(row_id="R2", film_id="F1", aud_id=1, prime_hm="19:00")]
        shows = resolver.resolve(rows, [], {}, set())
        keys = [(s.start, s.aud_id, s.film_id) for s in shows]
        assert len(keys) == len(set(keys))
        assert len(shows) == 6

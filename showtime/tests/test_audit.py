from showtime.app.services.audit import AuditService


class TestAuditReport:

    def test_schedule_by_film(self, schedule_session):
        report = schedule_session.audit()
        titles = [line.film_title for line in report.by_film]

        # Alphabetical groups, Moon Harbor (8 shows) before Thunder Road (6)
        assert titles == ["Moon Harbor"] * 8 + ["Thunder Road"] * 6
        thunder = [line for line in report.by_film if line.film_title == "Thunder Road"]
        assert thunder[0].start == "9:00am"
        assert thunder[0].gap == "2:30"
        assert thunder[-1].gap == ""
        assert not any(line.short_gap for line in report.by_film)

    def test_short_gap_flagged(self, schedule_session):
        schedule_session.add_manual_show("PRB-B1", "19:20")
        report = schedule_session.audit()
        thunder = [line for line in report.by_film if line.film_title == "Thunder Road"]
        prime = [line for line in thunder if line.start == "7:00pm"][0]
        assert prime.gap == "0:20"
        assert prime.short_gap

    def test_house_placement(self, schedule_session):
        schedule_session.set_auditorium("PRB-B1:0", 3)
        report = schedule_session.audit()
        placement = {p.film_title: p.houses for p in report.house_placement}
        assert placement["Thunder Road"] == ["Aud 1 (200)", "Aud 3 (120)"]
        assert placement["Moon Harbor"] == ["Aud 2 (150)"]

    def test_shows_per_auditorium(self, schedule_session):
        report = schedule_session.audit()
        per_aud = {s.aud_name: s for s in report.per_auditorium}
        assert per_aud["Aud 1"].shows == 6
        assert per_aud["Aud 1"].seats == 200
        assert per_aud["Aud 1"].first_show == "9:00am"
        assert per_aud["Aud 1"].last_show == "9:30pm"
        assert per_aud["Aud 2"].shows == 8

    def test_auditoriums_ordered_by_number(self, schedule_session):
        aud = schedule_session.add_auditorium(name="Aud 10", seats=90)
        schedule_session.set_auditorium("PRB-B1:0", aud.id)
        report = schedule_session.audit()
        assert [s.aud_name for s in report.per_auditorium] == ["Aud 1", "Aud 2", "Aud 10"]

    def test_shows_per_feature(self, schedule_session):
        schedule_session.set_auditorium("PRB-B1:0", 3)
        report = schedule_session.audit()
        feature = {f.film_title: f for f in report.per_feature}
        assert feature["Thunder Road"].prints == 2
        assert feature["Thunder Road"].shows == 6
        assert feature["Moon Harbor"].last_show == "10:20pm"


class TestStartTimeOrder:

    def test_operating_day_order_with_clean_gaps(self, schedule_session):
        schedule_session.set_start("PRB-B1:1", "00:30")
        lines = schedule_session.start_time_order()

        assert lines[0].start == "7:45am"
        assert lines[-1].start == "12:30am"
        prime = [line for line in lines if line.show_id == "PRB-B1:0"][0]
        # 19:00 show ends 21:15, next in Aud 1 starts 00:30
        assert prime.clean_gap == "3h15m"
        assert not prime.tight

    def test_tight_turnaround_flagged(self, schedule_session):
        schedule_session.set_start("PRB-B1:1", "21:20")
        lines = schedule_session.start_time_order()
        prime = [line for line in lines if line.show_id == "PRB-B1:0"][0]
        assert prime.clean_gap == "5m"
        assert prime.tight

    def test_service_is_usable_standalone(self, schedule_session):
        service = AuditService(schedule_session.catalog, schedule_session.current_date)
        assert service.start_time_order([]) == []

from dms.services.workflow_status import (
    add_route_department,
    latest_release,
    next_route_position,
    parse_route,
    parse_workflow_status,
    record_completion,
    record_creation,
    record_receive,
    record_release,
    route_departments,
)


class TestRoute:
    def test_positions_after_fifth_use_step_numbers(self):
        route = {}
        for dept in ["a", "b", "c", "d", "e", "f", "g"]:
            route = add_route_department(route, dept)
        assert route["first"] == "a"
        assert route["fifth"] == "e"
        assert route["step6"] == "f"
        assert route["step7"] == "g"
        assert route_departments(route) == ["a", "b", "c", "d", "e", "f", "g"]

    def test_department_not_added_twice(self):
        route = add_route_department({"first": "a"}, "a")
        assert route == {"first": "a"}

    def test_next_position_of_empty_route(self):
        assert next_route_position({}) == "first"

    def test_parse_route_tolerates_strings_and_lists(self):
        assert parse_route('{"first": "a"}') == {"first": "a"}
        assert parse_route(["a", "b"]) == {"first": "a", "second": "b"}
        assert parse_route("not json") == {}
        assert parse_route(None) == {}


class TestWorkflowStatus:
    def test_parse_tolerates_junk(self):
        assert parse_workflow_status("{broken") == {}
        assert parse_workflow_status(42) == {}
        assert parse_workflow_status([{"status": "x"}, "junk"]) == {
            "entry_1": {"status": "x"},
            "entry_2": {"status": "unknown"},
        }

    def test_created_entry_written_once(self):
        first = record_creation({}, at="t1", department_id="a", user_id="u")
        second = record_creation(first, at="t2", department_id="b", user_id="v")
        assert second["created"]["at"] == "t1"

    def test_releases_are_numbered(self):
        status = record_release({}, at="t1", from_department_id="a", to_department_id="b", user_id="u")
        status = record_release(status, at="t2", from_department_id="b", to_department_id="c", user_id="v")
        assert status["released_1"]["to_department_id"] == "b"
        assert status["released_2"]["status"] == "intransit"
        assert latest_release(status)["to_department_id"] == "c"

    def test_receive_marks_matching_release(self):
        status = record_release({}, at="t1", from_department_id="a", to_department_id="b", user_id="u")
        received = record_receive(status, at="t2", department_id="b", user_id="w")
        assert received["released_1"]["status"] == "received"
        assert received["released_1"]["received_by"] == "w"
        assert "received_1" not in received
        # input is left untouched
        assert status["released_1"]["status"] == "intransit"

    def test_receive_without_release_appends_entry(self):
        received = record_receive({}, at="t2", department_id="b", user_id="w")
        assert received["received_1"]["department_id"] == "b"

    def test_completion(self):
        done = record_completion({}, at="t3", user_id="u")
        assert done["completed"] == {"status": "completed", "at": "t3", "completed_by": "u"}

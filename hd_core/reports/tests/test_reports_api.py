# backend/hd_core/reports/tests/test_reports_api.py
import pytest

from hd_core.conftest import make_report
from hd_core.reports.models import HealthDataReport

pytestmark = pytest.mark.django_db

URL = "/api/v1/reports/"


def report_payload(facility, department, /, **overrides):
    data = {
        "facility": str(facility.id),
        "department": str(department.id),
        "year": 2024,
        "month": 3,
        "indicators": {"maternalHealth": {"institutionalDeliveries": 41}},
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------
def test_department_user_creates_report(client_for, department_user, facility, department):
    res = client_for(department_user).post(URL, report_payload(facility, department), format="json")
    assert res.status_code == 201, res.content

    data = res.json()["data"]
    assert data["status"] == "draft"
    assert data["district"] == "Pune"
    assert data["state"] == "Maharashtra"
    assert data["submitted_by"]["email"] == department_user.email
    assert data["indicators"]["maternalHealth"]["institutionalDeliveries"] == 41
    assert data["indicators"]["resources"]["totalBeds"] == 0


def test_department_user_cannot_report_for_other_department(client_for, department_user, facility, department_2):
    res = client_for(department_user).post(URL, report_payload(facility, department_2), format="json")
    assert res.status_code == 403


def test_hospital_admin_reports_for_any_own_department(client_for, hospital_admin, facility, department_2):
    res = client_for(hospital_admin).post(URL, report_payload(facility, department_2, status="submitted"), format="json")
    assert res.status_code == 201
    assert res.json()["data"]["status"] == "submitted"


def test_hospital_admin_cannot_report_for_other_facility(client_for, hospital_admin, facility_b, department_b):
    res = client_for(hospital_admin).post(URL, report_payload(facility_b, department_b), format="json")
    assert res.status_code == 403


def test_district_admin_cannot_create(client_for, district_admin, facility, department):
    res = client_for(district_admin).post(URL, report_payload(facility, department), format="json")
    assert res.status_code == 403


def test_duplicate_period_is_conflict(api_client, facility, department):
    assert api_client.post(URL, report_payload(facility, department), format="json").status_code == 201

    res = api_client.post(URL, report_payload(facility, department), format="json")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "conflict"
    assert HealthDataReport.objects.count() == 1


def test_new_report_cannot_start_approved(api_client, facility, department):
    res = api_client.post(URL, report_payload(facility, department, status="approved"), format="json")
    assert res.status_code == 400
    assert "status" in res.json()["error"]["details"]


def test_department_must_belong_to_facility(api_client, facility, department_b):
    res = api_client.post(URL, report_payload(facility, department_b), format="json")
    assert res.status_code == 400
    assert "department" in res.json()["error"]["details"]


def test_unknown_facility_is_not_found(api_client, department):
    res = api_client.post(
        URL,
        report_payload(department.facility, department, facility="00000000-0000-0000-0000-000000000404"),
        format="json",
    )
    assert res.status_code == 404


def test_unknown_indicator_field_rejected(api_client, facility, department):
    res = api_client.post(
        URL,
        report_payload(facility, department, indicators={"resources": {"ambulances": 2}}),
        format="json",
    )
    assert res.status_code == 400
    assert "indicators" in res.json()["error"]["details"]


@pytest.mark.parametrize("field, value", [("month", 13), ("month", 0), ("quarter", 5)])
def test_period_bounds(api_client, facility, department, field, value):
    res = api_client.post(URL, report_payload(facility, department, **{field: value}), format="json")
    assert res.status_code == 400


# ---------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------
@pytest.fixture
def spread_reports(
    super_admin,
    facility,
    department,
    department_2,
    department_b,
    department_far,
    department_other_state,
):
    return {
        "own": make_report(facility, department, user=super_admin),
        "sibling": make_report(facility, department_2, user=super_admin),
        "same_district": make_report(department_b.facility, department_b, user=super_admin),
        "same_state": make_report(department_far.facility, department_far, user=super_admin),
        "elsewhere": make_report(department_other_state.facility, department_other_state, user=super_admin),
    }


@pytest.mark.parametrize(
    "who, expected",
    [
        ("department_user", {"own"}),
        ("hospital_admin", {"own", "sibling"}),
        ("district_admin", {"own", "sibling", "same_district"}),
        ("state_admin", {"own", "sibling", "same_district", "same_state"}),
        ("super_admin", {"own", "sibling", "same_district", "same_state", "elsewhere"}),
    ],
)
def test_list_respects_role_scope(request, client_for, spread_reports, who, expected):
    user = request.getfixturevalue(who)
    body = client_for(user).get(URL).json()

    ids = {r["id"] for r in body["data"]}
    assert ids == {str(spread_reports[k].id) for k in expected}
    assert body["total"] == len(expected)


def test_explicit_filter_never_widens_scope(client_for, department_user, spread_reports, department_2):
    body = client_for(department_user).get(URL, {"department": str(department_2.id)}).json()
    assert body["total"] == 0


def test_list_filters(api_client, spread_reports):
    body = api_client.get(URL, {"state": "Maharashtra", "district": "Nagpur"}).json()
    assert [r["id"] for r in body["data"]] == [str(spread_reports["same_state"].id)]


def test_invalid_filter_value(api_client):
    res = api_client.get(URL, {"year": "abc"})
    assert res.status_code == 400


def test_retrieve_outside_scope_forbidden(client_for, department_user, spread_reports):
    res = client_for(department_user).get(f"{URL}{spread_reports['sibling'].id}/")
    assert res.status_code == 403


def test_retrieve_missing_is_not_found(api_client):
    res = api_client.get(f"{URL}00000000-0000-0000-0000-000000000404/")
    assert res.status_code == 404


# ---------------------------------------------------------------------
# Update / workflow
# ---------------------------------------------------------------------
@pytest.mark.parametrize("who", ["department_user", "hospital_admin"])
def test_status_change_silently_dropped_below_regional_admins(request, client_for, who, facility, department, super_admin):
    user = request.getfixturevalue(who)
    report = make_report(facility, department, user=super_admin, status="submitted")

    res = client_for(user).patch(
        f"{URL}{report.id}/", {"status": "approved", "notes": "corrected OPD count"}, format="json"
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "submitted"

    report.refresh_from_db()
    assert report.status == "submitted"
    assert report.notes == "corrected OPD count"
    assert report.approved_by is None
    assert report.last_updated_by == user


def test_district_admin_approves(client_for, district_admin, facility, department, super_admin):
    report = make_report(facility, department, user=super_admin, status="submitted")

    res = client_for(district_admin).patch(f"{URL}{report.id}/", {"status": "approved"}, format="json")
    assert res.status_code == 200

    report.refresh_from_db()
    assert report.status == "approved"
    assert report.approved_by == district_admin
    assert report.approved_at is not None
    assert report.last_updated_at is not None


def test_review_then_reject_then_resubmit(client_for, state_admin, facility, department, super_admin):
    report = make_report(facility, department, user=super_admin, status="submitted")
    c = client_for(state_admin)

    assert c.patch(f"{URL}{report.id}/", {"status": "reviewed"}, format="json").status_code == 200
    assert c.patch(f"{URL}{report.id}/", {"status": "rejected"}, format="json").status_code == 200
    assert c.patch(f"{URL}{report.id}/", {"status": "submitted"}, format="json").status_code == 200

    report.refresh_from_db()
    assert report.status == "submitted"
    assert report.reviewed_by == state_admin
    assert report.rejected_by == state_admin
    assert report.submitted_by == state_admin


def test_invalid_transition_rejected(api_client, facility, department, super_admin):
    report = make_report(facility, department, user=super_admin, status="approved")
    res = api_client.patch(f"{URL}{report.id}/", {"status": "draft"}, format="json")
    assert res.status_code == 400
    report.refresh_from_db()
    assert report.status == "approved"


def test_department_user_submits_own_draft(client_for, department_user, facility, department, super_admin):
    report = make_report(facility, department, user=super_admin, status="draft")
    c = client_for(department_user)

    assert c.patch(f"{URL}{report.id}/", {"status": "approved"}, format="json").status_code == 400

    res = c.patch(f"{URL}{report.id}/", {"status": "submitted"}, format="json")
    assert res.status_code == 200
    report.refresh_from_db()
    assert report.status == "submitted"
    assert report.submitted_by == department_user


def test_department_user_cannot_edit_sibling_report(client_for, department_user, facility, department_2, super_admin):
    report = make_report(facility, department_2, user=super_admin, status="draft")
    res = client_for(department_user).patch(f"{URL}{report.id}/", {"notes": "x"}, format="json")
    assert res.status_code == 403


def test_period_change_into_taken_slot_is_conflict(api_client, facility, department, super_admin):
    make_report(facility, department, user=super_admin, year=2024, month=1)
    other = make_report(facility, department, user=super_admin, year=2024, month=2)

    res = api_client.patch(f"{URL}{other.id}/", {"month": 1}, format="json")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "conflict"


def test_update_replaces_indicators(api_client, facility, department, super_admin):
    report = make_report(facility, department, user=super_admin, status="draft")
    res = api_client.patch(
        f"{URL}{report.id}/",
        {"indicators": {"laboratoryServices": {"totalLabTests": 300}}},
        format="json",
    )
    assert res.status_code == 200
    report.refresh_from_db()
    assert report.indicators["laboratoryServices"]["totalLabTests"] == 300
    assert report.indicators["maternalHealth"]["maternalDeaths"] == 0


# ---------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------
def test_only_super_admin_deletes(client_for, hospital_admin, super_admin, facility, department):
    report = make_report(facility, department, user=super_admin)

    assert client_for(hospital_admin).delete(f"{URL}{report.id}/").status_code == 403
    assert client_for(super_admin).delete(f"{URL}{report.id}/").status_code == 200
    assert not HealthDataReport.objects.filter(id=report.id).exists()


def test_submitter_with_reports_cannot_be_deleted(api_client, department_user, facility, department):
    make_report(facility, department, user=department_user)
    res = api_client.delete(f"/api/v1/users/{department_user.hd_profile.id}/")
    assert res.status_code == 400

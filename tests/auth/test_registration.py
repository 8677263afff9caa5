"""
Tests for job seeker and employer registration.
"""
from jose import jwt

from jobboard.auth import service
from jobboard.auth.models import AccountEmail, Admin, JobSeeker
from jobboard.config import get_settings
from jobboard.core.security import hash_password, verify_password


def test_register_job_seeker_returns_profile_and_token(register_job_seeker):
    response = register_job_seeker(email="a@example.com", phone="090-1234-5678")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "a@example.com"
    assert user["name"] == "Sam Seeker"
    assert user["phone"] == "090-1234-5678"
    assert user["deleted"] is False
    assert "password" not in user
    assert "reset_token" not in user
    assert body["data"]["token"]


def test_register_token_carries_partition_role(register_job_seeker, register_employer):
    settings = get_settings()
    seeker = register_job_seeker(email="seeker@example.com").json()["data"]
    employer = register_employer(email="boss@example.com").json()["data"]

    seeker_claims = jwt.decode(seeker["token"], settings.secret_key, algorithms=[settings.algorithm])
    employer_claims = jwt.decode(employer["token"], settings.secret_key, algorithms=[settings.algorithm])

    assert seeker_claims["role"] == "jobSeeker"
    assert seeker_claims["id"] == seeker["user"]["id"]
    assert seeker_claims["email"] == "seeker@example.com"
    assert "exp" in seeker_claims
    assert employer_claims["role"] == "employer"


def test_register_employer(register_employer):
    response = register_employer(contact_person="Dana", website="https://clinic.example.com")

    assert response.status_code == 201
    user = response.json()["data"]["user"]
    assert user["clinic_name"] == "Green Clinic"
    assert user["contact_person"] == "Dana"
    assert "password" not in user


def test_password_is_stored_hashed(register_job_seeker, db):
    register_job_seeker(email="hashed@example.com", password="pw1")

    account = db.query(JobSeeker).filter(JobSeeker.email == "hashed@example.com").one()
    assert account.password != "pw1"
    assert verify_password("pw1", account.password)


def test_registration_writes_email_registry(register_employer, db):
    register_employer(email="registry@example.com")

    entry = db.get(AccountEmail, "registry@example.com")
    assert entry is not None
    assert entry.role.value == "employer"


def test_duplicate_email_same_partition(register_job_seeker):
    assert register_job_seeker(email="dup@example.com").status_code == 201

    response = register_job_seeker(email="dup@example.com")
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Email is already registered"}


def test_duplicate_email_across_partitions(register_job_seeker, register_employer):
    assert register_job_seeker(email="one@example.com").status_code == 201
    assert register_employer(email="one@example.com").status_code == 400

    assert register_employer(email="two@example.com").status_code == 201
    assert register_job_seeker(email="two@example.com").status_code == 400


def test_duplicate_email_of_admin(register_job_seeker, register_employer, db):
    db.add(Admin(email="root@example.com", password=hash_password("secret"), name="Root"))
    db.commit()

    assert register_job_seeker(email="root@example.com").status_code == 400
    assert register_employer(email="root@example.com").status_code == 400


def test_soft_deleted_account_keeps_email_taken(register_job_seeker, register_employer, db):
    register_job_seeker(email="gone@example.com")
    account = db.query(JobSeeker).filter(JobSeeker.email == "gone@example.com").one()
    account.deleted = True
    db.commit()

    assert register_employer(email="gone@example.com").status_code == 400


def test_registry_backstop_rejects_race(register_job_seeker, monkeypatch, db):
    """A duplicate that slips past the pre-check is stopped at commit."""
    assert register_job_seeker(email="race@example.com").status_code == 201
    monkeypatch.setattr(service, "email_in_use", lambda db, email: False)

    response = register_job_seeker(email="race@example.com")

    assert response.status_code == 400
    assert response.json()["message"] == "Email is already registered"
    assert db.query(JobSeeker).filter(JobSeeker.email == "race@example.com").count() == 1


def test_register_rejects_invalid_payload(client):
    response = client.post(
        "/api/auth/job-seeker/register",
        json={"email": "not-an-email", "password": "pw", "name": "X"}
    )
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert body["errors"]


def test_register_employer_requires_clinic_name(client):
    response = client.post(
        "/api/auth/employer/register",
        json={"email": "nofirm@example.com", "password": "pw"}
    )
    assert response.status_code == 422


def test_duplicate_differing_only_in_domain_case(register_job_seeker, register_employer, db):
    assert register_job_seeker(email="Sam@Example.COM").status_code == 201

    same_partition = register_job_seeker(email="Sam@example.com")
    other_partition = register_employer(email="Sam@EXAMPLE.com")

    assert same_partition.status_code == 400
    assert same_partition.json()["message"] == "Email is already registered"
    assert other_partition.status_code == 400
    assert db.query(AccountEmail).count() == 1
    assert db.get(AccountEmail, "Sam@example.com") is not None


def test_email_in_use_normalizes_domain(register_job_seeker, db):
    register_job_seeker(email="a@example.com")

    assert service.email_in_use(db, "a@EXAMPLE.com")
    assert service.email_in_use(db, " a@example.com ")
    assert not service.email_in_use(db, "A@example.com")

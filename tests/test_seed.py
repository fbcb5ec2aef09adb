from models import Account, Customer, Job
from seed import DEMO_OWNER_ID, seed_demo_data


def test_seed_is_idempotent(db_session):
    first = seed_demo_data(db_session)
    second = seed_demo_data(db_session)

    assert first.id == second.id
    assert db_session.query(Account).filter(Account.owner_id == DEMO_OWNER_ID).count() == 1
    assert db_session.query(Customer).count() == 1
    assert db_session.query(Job).count() == 1


def test_seeded_job_belongs_to_seeded_customer(db_session):
    account = seed_demo_data(db_session)

    job = db_session.query(Job).filter(Job.account_id == account.id).one()
    customer = db_session.query(Customer).filter(Customer.account_id == account.id).one()
    assert job.customer_id == customer.id

"""Demo data for a fresh database."""

import logging
from datetime import date, timedelta

from bizadmin.stores import (
    CustomerStore,
    EmployeeStore,
    ExpenseStore,
    FileStore,
    InvoiceStore,
    LeadStore,
    OpportunityStore,
    ProcurementStore,
    ProjectStore,
    TaskStore,
)

logger = logging.getLogger(__name__)


def seed_demo_data(today: date | None = None) -> dict[str, int]:
    """Insert a small, consistent demo dataset and return counts per collection."""
    today = today or date.today()
    counts: dict[str, int] = {}

    employees = EmployeeStore()
    for first, last, dept, position, status, salary in [
        ("Ada", "Lovelace", "Engineering", "Lead Engineer", "active", 9500),
        ("Grace", "Hopper", "Engineering", "Engineer", "active", 8200),
        ("Alan", "Turing", "Research", "Researcher", "on_leave", 7800),
        ("Mary", "Jackson", "Finance", "Controller", "active", 7100),
        ("Ken", "Thompson", "Operations", "Ops Manager", "inactive", 6900),
    ]:
        employees.create({
            "first_name": first,
            "last_name": last,
            "email": f"{first}.{last}@example.com".lower(),
            "department": dept,
            "position": position,
            "status": status,
            "salary": salary,
            "hire_date": today - timedelta(days=400),
        })
    counts["employees"] = 5

    invoices = InvoiceStore()
    for number, client, amount, status in [
        ("INV-1001", "Acme Corp", "12000.00", "paid"),
        ("INV-1002", "Globex", "4500.00", "sent"),
        ("INV-1003", "Initech", "3000.00", "overdue"),
        ("INV-1004", "Umbrella", "800.00", "draft"),
    ]:
        invoices.create({
            "invoice_number": number,
            "client_name": client,
            "amount": amount,
            "status": status,
            "issue_date": today - timedelta(days=30),
            "due_date": today + timedelta(days=15),
        })
    counts["invoices"] = 4

    expenses = ExpenseStore()
    for description, category, amount, status in [
        ("Cloud hosting", "software", "1200.00", "approved"),
        ("Team offsite", "travel", "2300.00", "pending"),
        ("Office chairs", "equipment", "900.00", "rejected"),
    ]:
        expenses.create({
            "description": description,
            "category": category,
            "amount": amount,
            "status": status,
            "expense_date": today - timedelta(days=10),
        })
    counts["expenses"] = 3

    projects = ProjectStore()
    website = projects.create({
        "name": "Website relaunch", "status": "in_progress", "priority": "high",
        "progress": 40, "budget": "25000", "start_date": today - timedelta(days=60),
    })
    erp = projects.create({
        "name": "ERP migration", "status": "planning", "priority": "medium",
        "progress": 80, "budget": "60000",
    })
    counts["projects"] = 2

    tasks = TaskStore()
    for project, title, status, due in [
        (website, "Design mockups", "done", today - timedelta(days=20)),
        (website, "Content migration", "in_progress", today - timedelta(days=2)),
        (erp, "Vendor shortlist", "todo", today + timedelta(days=7)),
        (erp, "Data mapping", "review", today - timedelta(days=1)),
    ]:
        tasks.create({"project_id": project.id, "title": title, "status": status, "due_date": due})
    counts["tasks"] = 4

    procurement = ProcurementStore()
    for title, dept, category, amount, status in [
        ("Laptops", "Engineering", "hardware", "8000", "pending_approval"),
        ("Design licences", "Marketing", "software", "1500", "approved"),
        ("Standing desks", "Operations", "furniture", "4200", "rejected"),
    ]:
        procurement.create({
            "title": title, "department": dept, "category": category,
            "estimated_amount": amount, "status": status,
        })
    counts["procurement"] = 3

    LeadStore().create({"name": "Jane Doe", "company": "Hooli", "status": "converted", "estimated_value": "5000"})
    LeadStore().create({"name": "John Roe", "company": "Vandelay", "status": "qualified", "estimated_value": "12000"})
    counts["leads"] = 2
    CustomerStore().create({"name": "Acme Corp", "email": "ap@acme.example", "status": "active"})
    counts["customers"] = 1
    OpportunityStore().create({"name": "Acme renewal", "stage": "negotiation", "amount": "20000", "probability": 60})
    OpportunityStore().create({"name": "Globex pilot", "stage": "closed_won", "amount": "7500", "probability": 100})
    counts["opportunities"] = 2
    FileStore().create({"original_name": "contract.pdf", "mimetype": "application/pdf", "size": 120_000})
    FileStore().create({"original_name": "logo.png", "mimetype": "image/png", "size": 35_000})
    counts["files"] = 2

    logger.info("Seeded demo data: %s", counts)
    return counts

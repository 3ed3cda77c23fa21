# models.py
from flask_sqlalchemy import SQLAlchemy
from datetime import datetime


db = SQLAlchemy()


class Group(db.Model):
    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True, index=True)
    admin_token = db.Column(db.String(36), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    members = db.relationship(
        "Member",
        backref="group",
        cascade="all, delete-orphan",
    )
    expenses = db.relationship(
        "Expense",
        backref="group",
        cascade="all, delete-orphan",
    )

    @property
    def admin_path(self):
        return f"/g/{self.slug}/admin/{self.admin_token}"


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    token = db.Column(db.String(36), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def member_path(self):
        return f"/g/{self.group.slug}/m/{self.token}"


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False, index=True)
    paid_by_member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False)
    added_by_member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=True)
    description = db.Column(db.String(255), nullable=False)
    # minor currency units (cents)
    amount = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    payer = db.relationship("Member", foreign_keys=[paid_by_member_id])
    added_by = db.relationship("Member", foreign_keys=[added_by_member_id])
    splits = db.relationship(
        "ExpenseSplit",
        backref="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.id",
    )


class ExpenseSplit(db.Model):
    __tablename__ = "expense_splits"
    __table_args__ = (
        db.UniqueConstraint("expense_id", "member_id", name="uq_expense_splits_member"),
        db.CheckConstraint("amount >= 0", name="ck_expense_splits_amount"),
    )

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.Integer, db.ForeignKey("expenses.id"), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False)
    amount = db.Column(db.Integer, nullable=False)

    member = db.relationship("Member")

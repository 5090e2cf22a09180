from sqlalchemy import BigInteger, Column, Float, Integer, String
from sqlalchemy.orm import declarative_base

from allowance_tracker.core.categories import BUDGET_KEYS
from allowance_tracker.models.records import BudgetConfig, TransactionRecord

Base = declarative_base()

DEFAULT_USER = "default"


class Transaction(Base):
    __tablename__ = "transactions"
    id = Column(String(32), primary_key=True)
    title = Column(String(256), nullable=False, default="")
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)  # "income" or "expense"
    category = Column(String(64), nullable=False)
    date = Column(String(32), nullable=False, default="")  # display string
    timestamp = Column(BigInteger, nullable=False, index=True)  # epoch ms

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            title=self.title or "",
            amount=float(self.amount or 0.0),
            kind=(self.type or "expense").lower(),
            category=self.category,
            timestamp=int(self.timestamp or 0),
            date=self.date or "",
        )

    def to_json(self) -> dict:
        data = self.to_record().to_dict()
        data["timestamp"] = str(data["timestamp"])
        return data


class Budget(Base):
    __tablename__ = "budgets"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), unique=True, nullable=False, default=DEFAULT_USER)
    daily_allowance = Column(Float, nullable=False, default=0.0)
    transportation = Column(Float, nullable=False, default=0.0)
    food = Column(Float, nullable=False, default=0.0)
    supplies = Column(Float, nullable=False, default=0.0)
    load = Column(Float, nullable=False, default=0.0)
    projects = Column(Float, nullable=False, default=0.0)
    savings = Column(Float, nullable=False, default=0.0)

    def to_config(self) -> BudgetConfig:
        limits = {}
        for key in BUDGET_KEYS:
            value = float(getattr(self, key.value) or 0.0)
            if value > 0:
                limits[key.value] = value
        return BudgetConfig(daily_allowance=float(self.daily_allowance or 0.0), limits=limits)

    def to_json(self) -> dict:
        return {"userId": self.user_id, **self.to_config().to_api_dict()}

    def apply_config(self, config: BudgetConfig) -> None:
        self.daily_allowance = config.daily_allowance
        for key in BUDGET_KEYS:
            setattr(self, key.value, config.limit(key))

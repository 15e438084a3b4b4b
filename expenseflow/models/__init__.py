from .user import User
from .transaction import Transaction, INCOME, EXPENSE, KINDS
from .budget import BudgetGoal
from .budget_category import CategoryLimit
from .settings import UserSettings

__all__ = ["User", "Transaction", "BudgetGoal", "CategoryLimit", "UserSettings", "INCOME", "EXPENSE", "KINDS"]

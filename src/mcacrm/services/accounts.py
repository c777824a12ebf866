"""Bank account services for lenders, ISOs and syndicators."""
from mcacrm.models.account import ISOAccount, LenderAccount, SyndicatorAccount
from mcacrm.services.base import CrudService

_ACCOUNT_SEARCH = ("name", "bank_name", "account_number")


class LenderAccountService(CrudService):
    model = LenderAccount
    label = "lender account"
    money_fields = ("available_balance",)
    search_fields = _ACCOUNT_SEARCH
    default_sort = "name"


class ISOAccountService(CrudService):
    model = ISOAccount
    label = "ISO account"
    search_fields = _ACCOUNT_SEARCH
    default_sort = "name"


class SyndicatorAccountService(CrudService):
    model = SyndicatorAccount
    label = "syndicator account"
    money_fields = ("available_balance",)
    search_fields = _ACCOUNT_SEARCH
    default_sort = "name"

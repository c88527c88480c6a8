from choicecontracts.errors import (
    ContractError,
    NoNativeFunds,
    StdError,
    Unauthorized,
    generic_err,
)


def test_generic_err_display():
    err = generic_err("Unauthorized")
    assert str(err) == "Generic error: Unauthorized"
    assert err.message == "Unauthorized"


def test_generic_err_is_std_error_with_generic_kind():
    err = generic_err("No funds provided")
    assert isinstance(err, StdError)
    assert err.kind == "Generic error"
    assert err.message == "No funds provided"
    assert str(err) == "Generic error: No funds provided"


def test_std_error_custom_kind():
    err = StdError("config", kind="Not found")
    assert str(err) == "Not found: config"
    assert err.kind == "Not found"


def test_unauthorized_message():
    assert str(Unauthorized()) == "Unauthorized"


def test_no_native_funds_message():
    assert str(NoNativeFunds()) == "No native funds sent"


def test_contract_error_wraps_std_error():
    wrapped = ContractError(generic_err("Invalid asset: Expected a native token"))
    assert str(wrapped) == "Generic error: Invalid asset: Expected a native token"


def test_contract_error_hierarchy():
    unauthorized = Unauthorized()
    no_funds = NoNativeFunds()
    assert isinstance(unauthorized, ContractError)
    assert isinstance(no_funds, ContractError)
    assert str(unauthorized) == "Unauthorized"
    assert str(no_funds) == "No native funds sent"
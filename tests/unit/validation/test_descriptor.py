"""Tests for ValidatorDescriptor."""

from dataclasses import dataclass

import pytest

from ruleforge.validation import Member, Validator
from ruleforge.validation.validators import ChildValidatorAdaptor, NotEmptyValidator, NotNullValidator


@dataclass
class Address:
    postcode: str | None = None


@dataclass
class Customer:
    surname: str | None = None
    forename: str | None = None
    address: Address | None = None


class AddressValidator(Validator):
    def __init__(self):
        super().__init__()
        self.rule_for("postcode").not_null()


class CustomerAddressValidator(Validator):
    def __init__(self, customer: Customer):
        super().__init__()
        self.rule_for("postcode").not_null().when(lambda address: customer.surname is not None)


@pytest.fixture
def descriptor():
    """Descriptor for a validator with plain, child, dependent and rule-set rules."""
    validator = Validator()
    validator.rule_for("surname").not_null().not_empty()
    validator.rule_for("forename").not_null().dependent_rules(
        lambda: validator.rule_for("address").set_validator(AddressValidator())
    )
    validator.rule_set("create", lambda: validator.rule_for("address").set_validator(AddressValidator()))
    validator.rule_for(Member.this()).must(lambda customer: True)
    return validator.create_descriptor()


class TestValidatorDescriptor:
    """Test rule introspection."""

    def test_members_with_validators(self, descriptor):
        members = descriptor.get_members_with_validators()

        assert list(members) == ["surname", "forename", "address", None]
        assert [type(v) for v in members["surname"]] == [NotNullValidator, NotEmptyValidator]

    def test_validators_for_member(self, descriptor):
        validators = descriptor.get_validators_for_member("address")

        assert len(validators) == 1
        assert isinstance(validators[0], ChildValidatorAdaptor)

    def test_unknown_member(self, descriptor):
        assert descriptor.get_validators_for_member("missing") == []
        assert descriptor.get_name("missing") is None

    def test_dependent_rules(self, descriptor):
        dependents = descriptor.get_dependent_rules_for_member("forename")

        assert [rule.property_name for rule in dependents] == ["address"]

    def test_child_validator_types(self, descriptor):
        assert descriptor.get_child_validator_types("forename") == [AddressValidator]
        assert descriptor.get_child_validator_types("address") == [AddressValidator]

    def test_child_validator_types_from_providers(self):
        validator = Validator()
        validator.rule_for("address").set_validator(CustomerAddressValidator)
        validator.rule_for("forename").set_validator(
            lambda customer: CustomerAddressValidator(customer), validator_type=CustomerAddressValidator
        )
        validator.rule_for("surname").set_validator(lambda customer: AddressValidator())

        descriptor = validator.create_descriptor()

        assert descriptor.get_child_validator_types("address") == [CustomerAddressValidator]
        assert descriptor.get_child_validator_types("forename") == [CustomerAddressValidator]
        assert descriptor.get_child_validator_types("surname") == []

    def test_display_name(self, descriptor):
        assert descriptor.get_name("surname") == "Surname"

    def test_rules_by_rule_set(self, descriptor):
        grouped = descriptor.get_rules_by_rule_set()

        assert set(grouped) == {"default", "create"}
        assert [rule.property_name for rule in grouped["create"]] == ["address"]
        assert len(grouped["default"]) == 3

    def test_adaptor_repr(self):
        assert repr(ChildValidatorAdaptor(AddressValidator())) == "ChildValidatorAdaptor(AddressValidator)"
        assert repr(ChildValidatorAdaptor(provider=lambda context: None)) == "ChildValidatorAdaptor(dynamic)"

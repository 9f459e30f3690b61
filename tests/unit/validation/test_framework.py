"""Tests for the Validator aggregate and per-call options."""

from dataclasses import dataclass, field

import pytest

from ruleforge.config import CascadeMode, RuleforgeConfig
from ruleforge.exceptions import ConfigurationError, InvalidRuleSetError, ValidationFailedError
from ruleforge.validation import Member, ValidationOptions, Validator
from ruleforge.validation.selectors import (
    CompositeValidatorSelector,
    DefaultValidatorSelector,
    ExcludingValidatorSelector,
    MemberNameValidatorSelector,
    RuleSetValidatorSelector,
)


@dataclass
class Address:
    line1: str | None = None
    postcode: str | None = None


@dataclass
class Order:
    product_name: str | None = None
    amount: int = 0


@dataclass
class Person:
    surname: str | None = None
    forename: str | None = None
    email: str | None = None
    age: int = 0
    address: Address | None = None
    orders: list = field(default_factory=list)


class AddressValidator(Validator):
    def __init__(self):
        super().__init__()
        self.rule_for("line1").not_null()
        self.rule_for("postcode").not_null()


class OrderValidator(Validator):
    def __init__(self):
        super().__init__()
        self.rule_for("product_name").not_null()
        self.rule_for("amount").greater_than(0)


class PersonValidator(Validator):
    def __init__(self):
        super().__init__()
        self.rule_for("surname").not_null()
        self.rule_for("forename").not_null()
        self.rule_for("address").set_validator(AddressValidator())
        self.rule_for_each("orders").set_validator(OrderValidator())
        self.rule_set("contact", lambda: self.rule_for("email").not_null())


@pytest.fixture
def validator():
    """Validator with plain, nested, collection and rule-set rules."""
    return PersonValidator()


@pytest.fixture
def person():
    """Person failing at every level."""
    return Person(address=Address(), orders=[Order(product_name="Book", amount=0)])


class TestValidator:
    """Test basic Validator behaviour."""

    def test_valid_instance(self, validator):
        person = Person(surname="Smith", forename="Jo", address=Address("1 Main St", "AB1"))

        result = validator.validate(person)

        assert result.is_valid
        assert result.errors == ()
        assert result.exit_code == 0

    def test_failures_in_declaration_order(self, validator, person):
        result = validator.validate(person)

        assert [failure.property_name for failure in result.errors] == [
            "surname",
            "forename",
            "address.line1",
            "address.postcode",
            "orders[0].amount",
        ]
        assert result.exit_code == 1

    def test_rules_are_exposed_in_order(self, validator):
        assert [rule.property_name for rule in validator.rules] == [
            "surname", "forename", "address", "orders", "email",
        ]

    def test_null_instance_is_rejected(self, validator):
        with pytest.raises(ConfigurationError):
            validator.validate(None)

    def test_validator_can_be_reused(self, validator, person):
        first = validator.validate(person)
        second = validator.validate(person)

        assert first.errors == second.errors

    def test_model_level_rule(self):
        validator = Validator()
        validator.rule_for(Member.this()).must(lambda p: p.surname != p.forename).with_message("Names must differ")

        result = validator.validate(Person(surname="Lee", forename="Lee"))

        assert len(result.errors) == 1
        assert result.errors[0].property_name == ""
        assert result.errors[0].error_message == "Names must differ"

    def test_mapping_instances(self):
        validator = Validator()
        validator.rule_for("name").not_empty()
        validator.rule_for("age").greater_than_or_equal(18)

        result = validator.validate({"age": 12})

        assert [failure.property_name for failure in result.errors] == ["name", "age"]

    def test_str_joins_messages(self):
        validator = Validator()
        validator.rule_for("surname").not_null()
        validator.rule_for("forename").not_null()

        assert str(validator.validate(Person())) == (
            "'Surname' must not be empty.\n'Forename' must not be empty."
        )


class TestClassLevelCascade:
    """Test the validator-wide cascade mode."""

    def test_stop_after_first_failing_rule(self, validator, person):
        validator.class_level_cascade_mode = CascadeMode.STOP

        result = validator.validate(person)

        assert [failure.property_name for failure in result.errors] == ["surname"]

    def test_stop_keeps_evaluating_passing_rules(self, validator):
        validator.class_level_cascade_mode = CascadeMode.STOP

        result = validator.validate(Person(surname="Smith"))

        assert [failure.property_name for failure in result.errors] == ["forename"]

    def test_config_sets_cascade_defaults(self):
        config = RuleforgeConfig(cascade={"ruleLevel": "stop", "classLevel": "stop"})
        validator = Validator(config)
        validator.rule_for("surname").not_null().not_empty()
        validator.rule_for("forename").not_null()

        result = validator.validate(Person())

        assert validator.rule_level_cascade_mode == CascadeMode.STOP
        assert len(result.errors) == 1


class TestRuleSets:
    """Test rule-set selection."""

    def test_default_skips_tagged_rules(self, validator):
        result = validator.validate(Person(surname="Smith", forename="Jo"))

        assert result.is_valid

    def test_named_rule_set_only(self, validator, person):
        result = validator.validate(person, rule_sets=["contact"])

        assert [failure.property_name for failure in result.errors] == ["email"]

    def test_default_and_named(self, validator):
        result = validator.validate(Person(forename="Jo"), rule_sets="default, contact")

        assert [failure.property_name for failure in result.errors] == ["surname", "email"]

    def test_wildcard_runs_everything(self, validator, person):
        result = validator.validate(person, rule_sets=["*"])

        assert len(result.errors) == 6

    def test_unknown_rule_set(self, validator, person):
        with pytest.raises(InvalidRuleSetError) as exc_info:
            validator.validate(person, rule_sets=["missing"])

        assert exc_info.value.rule_sets == ["missing"]
        assert "PersonValidator" in str(exc_info.value)

    def test_rule_set_requires_a_name(self, validator):
        with pytest.raises(ConfigurationError):
            validator.rule_set([], lambda: validator.rule_for("age").greater_than(0))

    def test_rule_in_several_sets(self):
        validator = Validator()
        validator.rule_set(["a", "b"], lambda: validator.rule_for("surname").not_null())

        assert validator.declared_rule_sets() == {"a", "b"}
        assert not validator.validate(Person(), rule_sets=["b"]).is_valid

    def test_rule_sets_on_child_validator(self):
        child = Validator()
        child.rule_for("line1").not_null()
        child.rule_set("strict", lambda: child.rule_for("postcode").not_null())

        validator = Validator()
        validator.rule_for("address").set_validator(child, "strict")

        result = validator.validate(Person(address=Address()))

        assert [failure.property_name for failure in result.errors] == ["address.postcode"]


class TestPropertySelection:
    """Test include/exclude selection."""

    def test_include_top_level(self, validator, person):
        result = validator.validate(person, include_properties=["forename"])

        assert [failure.property_name for failure in result.errors] == ["forename"]

    def test_include_runs_everything_below(self, validator, person):
        result = validator.validate(person, include_properties=["address"])

        assert [failure.property_name for failure in result.errors] == ["address.line1", "address.postcode"]

    def test_include_nested_member(self, validator, person):
        result = validator.validate(person, include_properties=["address.postcode"])

        assert [failure.property_name for failure in result.errors] == ["address.postcode"]

    def test_include_collection_member_with_index_wildcard(self, validator):
        person = Person(orders=[Order(amount=0), Order(amount=0)])

        result = validator.validate(person, include_properties=["orders[].product_name"])

        assert [failure.property_name for failure in result.errors] == [
            "orders[0].product_name",
            "orders[1].product_name",
        ]

    def test_include_members(self, validator, person):
        result = validator.validate(person, include_properties=[Member.attr("surname"), "forename"])

        assert len(result.errors) == 2

    def test_exclude(self, validator, person):
        result = validator.validate(person, exclude_properties=["address", "orders"])

        assert [failure.property_name for failure in result.errors] == ["surname", "forename"]

    def test_exclude_nested(self, validator, person):
        result = validator.validate(person, exclude_properties=["address.line1"])

        assert "address.line1" not in [failure.property_name for failure in result.errors]
        assert "address.postcode" in [failure.property_name for failure in result.errors]


class TestValidationOptions:
    """Test ValidationOptions parsing and selector construction."""

    def test_comma_separated_names(self):
        options = ValidationOptions(rule_sets="a, b", include_properties="surname,forename")

        assert options.rule_sets == ["a", "b"]
        assert options.include_properties == ["surname", "forename"]

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            ValidationOptions(rulesets=["a"])

    def test_model_level_member_cannot_be_included(self):
        with pytest.raises(ValueError):
            ValidationOptions(include_properties=[Member.this()])

    def test_selector_default(self):
        assert isinstance(ValidationOptions().build_selector(), DefaultValidatorSelector)

    def test_selector_rule_sets(self):
        assert isinstance(ValidationOptions(rule_sets=["a"]).build_selector(), RuleSetValidatorSelector)

    def test_selector_members(self):
        selector = ValidationOptions(include_properties=["a"]).build_selector()
        assert isinstance(selector, MemberNameValidatorSelector)

    def test_selector_composite(self):
        selector = ValidationOptions(rule_sets=["a"], include_properties=["b"]).build_selector()
        assert isinstance(selector, CompositeValidatorSelector)

    def test_selector_excluding(self):
        selector = ValidationOptions(exclude_properties=["a"]).build_selector()
        assert isinstance(selector, ExcludingValidatorSelector)
        assert isinstance(selector.inner, DefaultValidatorSelector)

    def test_options_object_and_keywords_merge(self, validator, person):
        options = ValidationOptions(include_properties=["surname", "forename"])

        result = validator.validate(person, options, cascade_mode="stop")

        assert len(result.errors) == 2
        assert options.cascade_mode is None


class TestConditionalBlocks:
    """Test validator-level when/unless/otherwise."""

    def build(self):
        validator = Validator()
        validator.when(
            lambda p: p.age >= 18,
            lambda: validator.rule_for("email").not_null(),
        ).otherwise(
            lambda: validator.rule_for("forename").not_null()
        )
        return validator

    def test_when_branch(self):
        result = self.build().validate(Person(age=30))

        assert [failure.property_name for failure in result.errors] == ["email"]

    def test_otherwise_branch(self):
        result = self.build().validate(Person(age=10))

        assert [failure.property_name for failure in result.errors] == ["forename"]

    def test_unless(self):
        validator = Validator()
        validator.unless(lambda p: p.age >= 18, lambda: validator.rule_for("surname").not_null())

        assert validator.validate(Person(age=30)).is_valid
        assert not validator.validate(Person(age=3)).is_valid

    def test_nested_blocks_combine(self):
        validator = Validator()
        validator.when(
            lambda p: p.age > 0,
            lambda: validator.when(lambda p: p.age < 18, lambda: validator.rule_for("surname").not_null()),
        )

        assert validator.validate(Person(age=0)).is_valid
        assert validator.validate(Person(age=40)).is_valid
        assert not validator.validate(Person(age=5)).is_valid


class TestValidateAndRaise:
    """Test raising on failure."""

    def test_raises_with_failures(self, validator, person):
        with pytest.raises(ValidationFailedError) as exc_info:
            validator.validate_and_raise(person)

        assert len(exc_info.value.errors) == 5
        assert "surname: 'Surname' must not be empty." in str(exc_info.value)

    def test_returns_result_when_valid(self, validator):
        person = Person(surname="Smith", forename="Jo")

        assert validator.validate_and_raise(person).is_valid

    def test_raise_on_failure_option(self, validator, person):
        with pytest.raises(ValidationFailedError):
            validator.validate(person, ValidationOptions(raise_on_failure=True))

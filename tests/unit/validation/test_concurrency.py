"""A single Validator shared across threads must keep each call's state separate."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from ruleforge.validation import Validator


@dataclass
class Order:
    product_name: str


@dataclass
class Customer:
    number: int
    surname: str | None = None
    orders: list = field(default_factory=list)


def build_customer(number: int) -> Customer:
    orders = [
        Order(f"bad-{number}-{index}" if index % 3 == number % 3 else f"good-{number}-{index}")
        for index in range(6)
    ]
    return Customer(number=number, surname=None if number % 2 else "Smith", orders=orders)


def expected_paths(customer: Customer) -> list[str]:
    paths = [] if customer.surname else ["surname"]
    paths.extend(
        f"orders[{index}].product_name"
        for index, order in enumerate(customer.orders)
        if order.product_name.startswith("bad-")
    )
    return paths


def shared_validator() -> Validator:
    order_validator = Validator()
    order_validator.rule_for("product_name").must(lambda name: name.startswith("good-")).with_message(
        "Order {CollectionIndex} is bad"
    )
    validator = Validator()
    validator.rule_for("surname").not_null()
    validator.rule_for_each("orders").set_validator(order_validator)
    return validator


class TestConcurrentValidation:
    """Test concurrent use of one validator."""

    def test_threads_share_one_validator(self):
        validator = shared_validator()
        customers = [build_customer(number) for number in range(200)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(validator.validate, customers))

        for customer, result in zip(customers, results):
            assert [f.property_name for f in result.errors] == expected_paths(customer)
            for failure in result.errors:
                if failure.property_name == "surname":
                    continue
                index = failure.placeholders["CollectionIndex"]
                assert failure.attempted_value == f"bad-{customer.number}-{index}"
                assert failure.error_message == f"Order {index} is bad"

    def test_async_passes_share_one_validator(self):
        validator = shared_validator()
        customers = [build_customer(number) for number in range(50)]

        async def run_all():
            return await asyncio.gather(*(validator.validate_async(customer) for customer in customers))

        results = asyncio.run(run_all())

        for customer, result in zip(customers, results):
            assert [f.property_name for f in result.errors] == expected_paths(customer)

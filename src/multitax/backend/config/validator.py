"""Utilities for validating rule set data and surfacing contributor mistakes.

Schema validation already rejects structurally broken files; the checks here
catch values that parse fine but are almost certainly typos, such as a rate
of ``9`` instead of ``0.09``.
"""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Iterable, Sequence

from .year_config import (
    CONFIG_DIRECTORY,
    ConfigurationError,
    ContributionCategory,
    FilingAmount,
    GermanyRules,
    IndiaRules,
    TaxBracket,
    TaxYearRules,
    UnitedStatesRules,
    load_manifest,
    load_rule_file,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _check_rate(scope: str, label: str, value: float) -> list[str]:
    if value < 0 or value > 1:
        return [_format_scope(scope, f"{label} {value} must be between 0 and 1")]
    return []


def _validate_brackets(scope: str, brackets: Iterable[TaxBracket]) -> list[str]:
    errors: list[str] = []
    for index, bracket in enumerate(brackets):
        errors.extend(_check_rate(scope, f"bracket {index} rate", bracket.rate))
    return errors


def _validate_contributions(categories: Sequence[ContributionCategory]) -> list[str]:
    errors: list[str] = []

    duplicates = [
        identifier
        for identifier, count in Counter(category.id for category in categories).items()
        if count > 1
    ]
    if duplicates:
        errors.append(
            _format_scope(
                "contributions",
                f"duplicate contribution identifiers detected: {sorted(duplicates)}",
            )
        )

    for category in categories:
        scope = f"contributions.{category.id}"
        errors.extend(_check_rate(scope, "rate", category.rate))
        errors.extend(_check_rate(scope, "supplementary rate", category.supplementary_rate))
        errors.extend(_check_rate(scope, "childless surcharge", category.childless_surcharge))
        errors.extend(_check_rate(scope, "child discount", category.child_discount))
        if category.top_up is not None:
            errors.extend(_check_rate(scope, "top-up rate", category.top_up.rate))

    return errors


def _validate_filing_amount(
    scope: str, amount: FilingAmount, filing_statuses: Sequence[str]
) -> list[str]:
    if "married" in filing_statuses and amount.married is None:
        return [_format_scope(scope, "no amount defined for married filers")]
    return []


def _validate_germany(rules: GermanyRules) -> list[str]:
    errors: list[str] = []

    for index, zone in enumerate(rules.income_tax.progressive):
        errors.extend(
            _check_rate("income_tax.progressive", f"zone {index} entry rate", zone.entry_rate)
        )
    for index, zone in enumerate(rules.income_tax.flat):
        errors.extend(_check_rate("income_tax.flat", f"zone {index} rate", zone.rate))

    errors.extend(_check_rate("solidarity", "rate", rules.solidarity.rate))
    errors.extend(_check_rate("solidarity", "softening rate", rules.solidarity.softening_rate))
    errors.extend(_check_rate("church_tax", "default rate", rules.church_tax.default_rate))

    known_states = set(rules.states)
    for state, rate in sorted(rules.church_tax.state_rates.items()):
        if state not in known_states:
            errors.append(
                _format_scope("church_tax.state_rates", f"unknown state '{state}'")
            )
        errors.extend(_check_rate("church_tax.state_rates", f"{state} rate", rate))

    errors.extend(
        _validate_filing_amount(
            "standard_deduction", rules.standard_deduction, rules.filing_statuses
        )
    )
    return errors


def _validate_united_states(rules: UnitedStatesRules) -> list[str]:
    errors: list[str] = []

    for status in rules.filing_statuses:
        table = rules.brackets.get(status)
        if table is None:
            errors.append(_format_scope("brackets", f"missing table for '{status}' filers"))
            continue
        errors.extend(_validate_brackets(f"brackets.{status}", table))

    for state, rate in sorted(rules.state_tax_rates.items()):
        errors.extend(_check_rate("state_tax_rates", state, rate))

    errors.extend(
        _validate_filing_amount(
            "standard_deduction", rules.standard_deduction, rules.filing_statuses
        )
    )
    return errors


def _validate_india(rules: IndiaRules) -> list[str]:
    errors: list[str] = []

    for name, regime in sorted(rules.regimes.items()):
        errors.extend(_validate_brackets(f"regimes.{name}.brackets", regime.brackets))
        errors.extend(
            _validate_brackets(f"regimes.{name}.surcharge_brackets", regime.surcharge_brackets)
        )
        if not regime.allow_itemized:
            continue
        if not rules.deductions:
            errors.append(
                _format_scope(
                    f"regimes.{name}",
                    "itemized deductions are allowed but none are configured",
                )
            )

    errors.extend(_check_rate("cess_rate", "rate", rules.cess_rate))
    return errors


def validate_rule_set(rules: TaxYearRules) -> list[str]:
    """Return a list of validation issues for the provided rule set."""

    errors: list[str] = []

    if isinstance(rules, GermanyRules):
        errors.extend(_validate_germany(rules))
    elif isinstance(rules, UnitedStatesRules):
        errors.extend(_validate_united_states(rules))
    elif isinstance(rules, IndiaRules):
        errors.extend(_validate_india(rules))

    errors.extend(_validate_contributions(rules.contributions))
    return errors


def validate_directory(
    directory: Path = CONFIG_DIRECTORY,
    jurisdictions: Sequence[str] | None = None,
) -> dict[str, list[str]]:
    """Validate every rule set listed in the manifest of ``directory``.

    Results are keyed by ``"<jurisdiction> <year>"``; files that fail to load
    report the load error as their only issue.
    """

    manifest = load_manifest(directory)
    wanted = {code.upper() for code in jurisdictions} if jurisdictions else None
    results: dict[str, list[str]] = {}

    for entry in manifest.years:
        if wanted is not None and entry.jurisdiction not in wanted:
            continue
        label = f"{entry.jurisdiction} {entry.year}"
        try:
            rules = load_rule_file(directory / entry.resolved_filename, entry)
        except (ConfigurationError, FileNotFoundError) as error:
            results[label] = [f"failed to load rule set: {error}"]
            continue
        results[label] = validate_rule_set(rules)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate bundled tax rule sets and report issues helpful to contributors."
    )
    parser.add_argument(
        "jurisdictions",
        nargs="*",
        help="Jurisdiction codes to validate (defaults to all configured rule sets)",
    )
    parser.add_argument(
        "--directory",
        type=Path,
        default=CONFIG_DIRECTORY,
        help="Directory holding manifest.yaml and the rule set files",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        results = validate_directory(args.directory, args.jurisdictions or None)
    except (ConfigurationError, FileNotFoundError) as error:
        print(f"failed to load manifest: {error}")
        return 1

    if not results:
        parser.print_help()
        return 1

    exit_code = 0
    for label, issues in results.items():
        if issues:
            exit_code = 1
            print(f"[{label}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{label}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())

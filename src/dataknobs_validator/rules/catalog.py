"""Built-in rule catalog: rule name to constructor."""

from __future__ import annotations

from .base import Rule, RuleConstructor
from .dates import (
    AfterOrEqualRule,
    AfterRule,
    BeforeOrEqualRule,
    BeforeRule,
    DateEqualsRule,
    DateFormatRule,
    DateRule,
    TimezoneRule,
)
from .network import (
    HexColorRule,
    IpRule,
    Ipv4Rule,
    Ipv6Rule,
    MacAddressRule,
    UlidRule,
    UrlRule,
    UuidRule,
)
from .presence import (
    BailRule,
    FilledRule,
    MissingIfRule,
    MissingRule,
    MissingUnlessRule,
    MissingWithAllRule,
    MissingWithRule,
    NullableRule,
    PresentIfRule,
    PresentRule,
    PresentUnlessRule,
    PresentWithAllRule,
    PresentWithRule,
    ProhibitedIfAcceptedRule,
    ProhibitedIfDeclinedRule,
    ProhibitedIfRule,
    ProhibitedRule,
    ProhibitedUnlessRule,
    ProhibitsRule,
    RequiredArrayKeysRule,
    RequiredIfAcceptedRule,
    RequiredIfDeclinedRule,
    RequiredIfRule,
    RequiredRule,
    RequiredUnlessRule,
    RequiredWithAllRule,
    RequiredWithoutAllRule,
    RequiredWithoutRule,
    RequiredWithRule,
    SometimesRule,
)
from .relations import ConfirmedRule, DifferentRule, DistinctRule, InRule, NotInRule, SameRule
from .size import (
    BetweenRule,
    DecimalRule,
    DigitsBetweenRule,
    DigitsRule,
    ExactSizeRule,
    GreaterThanOrEqualRule,
    GreaterThanRule,
    LessThanOrEqualRule,
    LessThanRule,
    MaxDigitsRule,
    MaxRule,
    MinDigitsRule,
    MinRule,
    MultipleOfRule,
)
from .strings import (
    AlphaDashRule,
    AlphaNumRule,
    AlphaRule,
    AsciiRule,
    DoesntEndWithRule,
    DoesntStartWithRule,
    EmailRule,
    EndsWithRule,
    LowercaseRule,
    NotRegexRule,
    RegexRule,
    StartsWithRule,
    UppercaseRule,
)
from .types import (
    AcceptedIfRule,
    AcceptedRule,
    ArrayRule,
    BooleanRule,
    DeclinedIfRule,
    DeclinedRule,
    IntegerRule,
    JsonRule,
    NumericRule,
    StringRule,
)

RULE_CLASSES: tuple[type[Rule], ...] = (
    # Presence and nullability
    RequiredRule, NullableRule, SometimesRule, BailRule, FilledRule, PresentRule,
    MissingRule, ProhibitedRule,
    RequiredIfRule, RequiredUnlessRule, RequiredWithRule, RequiredWithAllRule,
    RequiredWithoutRule, RequiredWithoutAllRule,
    RequiredIfAcceptedRule, RequiredIfDeclinedRule, RequiredArrayKeysRule,
    MissingIfRule, MissingUnlessRule, MissingWithRule, MissingWithAllRule,
    PresentIfRule, PresentUnlessRule, PresentWithRule, PresentWithAllRule,
    ProhibitedIfRule, ProhibitedUnlessRule, ProhibitedIfAcceptedRule,
    ProhibitedIfDeclinedRule, ProhibitsRule,
    # Primitive types
    StringRule, IntegerRule, NumericRule, BooleanRule, ArrayRule, JsonRule,
    AcceptedRule, DeclinedRule, AcceptedIfRule, DeclinedIfRule,
    # Size and magnitude
    MinRule, MaxRule, BetweenRule, ExactSizeRule,
    GreaterThanRule, GreaterThanOrEqualRule, LessThanRule, LessThanOrEqualRule,
    DigitsRule, DigitsBetweenRule, MinDigitsRule, MaxDigitsRule,
    DecimalRule, MultipleOfRule,
    # Strings
    AlphaRule, AlphaNumRule, AlphaDashRule, AsciiRule, UppercaseRule, LowercaseRule,
    StartsWithRule, EndsWithRule, DoesntStartWithRule, DoesntEndWithRule,
    RegexRule, NotRegexRule, EmailRule,
    # Identifiers, network and color
    UuidRule, UlidRule, UrlRule, IpRule, Ipv4Rule, Ipv6Rule, MacAddressRule, HexColorRule,
    # Dates
    DateRule, DateFormatRule, AfterRule, AfterOrEqualRule, BeforeRule,
    BeforeOrEqualRule, DateEqualsRule, TimezoneRule,
    # Field relationships
    SameRule, DifferentRule, ConfirmedRule, InRule, NotInRule, DistinctRule,
)

#: Alternative spellings accepted by the parser
ALIASES: dict[str, type[Rule]] = {
    "int": IntegerRule,
}

#: Rule names that put a field's plan in numeric context
NUMERIC_RULES = frozenset({"numeric", "integer", "int", "decimal"})

#: Rule names whose argument tail is one pattern, commas included
PATTERN_RULES = frozenset({"regex", "not_regex"})


def builtin_rules() -> dict[str, RuleConstructor]:
    """Build the default name to constructor table."""
    table: dict[str, RuleConstructor] = {cls.name: cls.from_args for cls in RULE_CLASSES}
    table.update({alias: cls.from_args for alias, cls in ALIASES.items()})
    return table

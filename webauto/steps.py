# webauto/steps.py
"""
@file steps.py
@brief Step sentences understood by the scenario runner.

Each sentence maps onto a runner keyword; named groups become keyword args.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Pattern, Tuple

from .exceptions import StepDefinitionError

_GHERKIN_KEYWORD = re.compile(r"^(?:Given|When|Then|And|But|\*)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class StepDefinition:
    pattern: Pattern[str]
    keyword: str

    @property
    def sentence(self) -> str:
        return self.pattern.pattern


def _step(pattern: str, keyword: str) -> StepDefinition:
    return StepDefinition(re.compile(pattern), keyword)


STEP_DEFINITIONS: List[StepDefinition] = [
    _step(r'^I am on "(?P<url>[^"]*)"$', "visit"),
    _step(r'^I go to "(?P<url>[^"]*)"$', "visit"),
    _step(r'^I wait "(?P<seconds>[^"]*)" seconds$', "wait"),
    _step(r'^the viewport has width "(?P<width>[^"]+)" and height "(?P<height>[^"]+)"$', "set_viewport"),
    _step(r'^the viewport changes to width "(?P<width>[^"]+)" and height "(?P<height>[^"]+)"$', "set_viewport"),
    _step(r'^selector "(?P<selector>[^"]*)" exists$', "selector_exists"),
    _step(r'^at least one selector matching "(?P<selector>[^"]*)" is visible$', "any_visible"),
    _step(r'^selector matching "(?P<selector>[^"]*)" is visible$', "selector_visible"),
    _step(r'^selector matching "(?P<selector>[^"]*)" is not visible$', "selector_not_visible"),
    _step(r'^I click the first visible element matching "(?P<selector>[^"]*)"$', "click_first_visible"),
    _step(r'^I click the element matching "(?P<selector>[^"]*)"$', "click"),
    _step(r'^I click on "(?P<selector>[^"]*)"$', "click"),
    _step(r'^I doubleclick the element matching "(?P<selector>[^"]*)"$', "doubleclick"),
    _step(r'^I should see "(?P<text>[^"]*)"$', "visible_text"),
    _step(r'^the "(?P<selector>[^"]*)" element should contain "(?P<text>[^"]*)"$', "element_text"),
    _step(r'^the "(?P<name>[^"]*)" query parameter should be "(?P<value>[^"]*)"$', "assert_query_param"),
]


def match_step(text: str) -> Tuple[str, Dict[str, Any]]:
    """
    Resolve a step sentence to (keyword, args).

    @throws StepDefinitionError when no definition matches
    """
    sentence = _GHERKIN_KEYWORD.sub("", text.strip())
    for definition in STEP_DEFINITIONS:
        m = definition.pattern.match(sentence)
        if m:
            return definition.keyword, m.groupdict()
    raise StepDefinitionError(text)


def list_sentences() -> List[str]:
    return [definition.sentence for definition in STEP_DEFINITIONS]

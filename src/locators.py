from dataclasses import dataclass, field


CLICK_STRATEGIES = ("plain", "script", "forced")

# Returns false when nothing matches so the caller can escalate
SCRIPT_CLICK = """
(sel) => {
    const element = document.querySelector(sel);
    if (!element) return false;
    element.click();
    return true;
}
"""


@dataclass
class ClickOutcome:
    selector: str
    strategy: str | None = None
    attempts: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def performed(self) -> bool:
        return self.strategy is not None


def pick_first(candidates, visible) -> str | None:
    """Return the first candidate whose visibility flag is set, else None."""
    for candidate, is_visible in zip(candidates, visible):
        if is_visible:
            return candidate
    return None


async def is_visible(page, selector: str) -> bool:
    try:
        return bool(await page.is_visible(selector))
    except Exception:
        return False


async def find_first_visible(page, candidates, verbose: bool = False) -> str | None:
    """Check candidates in order and bind to the first visible one.

    Probing stops at the first hit and the binding is made by ``pick_first``
    over what was checked. Absence is reported as None, never raised.
    """
    checked, flags = [], []
    for selector in candidates:
        visible = await is_visible(page, selector)
        checked.append(selector)
        flags.append(visible)
        if visible:
            break
        if verbose:
            print(f"→ Not visible: {selector}")
    bound = pick_first(checked, flags)
    if bound and verbose:
        print(f"✓ Bound {bound}")
    return bound


async def resolve_fields(page, roles: dict, verbose: bool = False) -> dict:
    resolved = {}
    for role, candidates in roles.items():
        resolved[role] = await find_first_visible(page, candidates, verbose=verbose)
    return resolved


async def count_visible(page, selectors) -> tuple[int, list[dict]]:
    results = []
    for selector in selectors:
        results.append({"selector": selector, "visible": await is_visible(page, selector)})
    return sum(1 for r in results if r["visible"]), results


async def click_with_fallback(page, selector: str, timeout: int = 5000, verbose: bool = False) -> ClickOutcome:
    """Click through obstructions: plain click, then a DOM click, then a forced click.

    Stops at the first strategy that works. If all three fail the outcome has
    no strategy and the caller decides whether that matters.
    """
    outcome = ClickOutcome(selector=selector)
    for strategy in CLICK_STRATEGIES:
        outcome.attempts.append(strategy)
        try:
            if strategy == "plain":
                await page.click(selector, timeout=timeout)
            elif strategy == "script":
                clicked = await page.evaluate(SCRIPT_CLICK, selector)
                if clicked is False:
                    raise LookupError(f"No element for {selector}")
            else:
                await page.click(selector, force=True, timeout=timeout)
        except Exception as e:
            outcome.errors.append(f"{strategy}: {e}")
            if verbose:
                print(f"⚠️ {strategy} click failed for {selector}: {e}")
            continue
        outcome.strategy = strategy
        if verbose:
            print(f"✓ Clicked {selector} via {strategy} click")
        return outcome
    print(f"✖ All click methods failed for {selector}")
    return outcome

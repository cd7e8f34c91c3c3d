"""Generate an example .ics file to see what the format looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

from datetime import date, datetime, timezone

from icsgen.document import CalendarDocument

UTC = timezone.utc

doc = CalendarDocument.create(
    prodid="-//icsgen//example//EN",
    name="Example calendar",
    method="PUBLISH",
)

doc.add_event(
    uid="midsummer-2024@example.com",
    dtstamp=datetime(2024, 6, 26, 12, 0, tzinfo=UTC),
    start=date(2024, 6, 24),
    end=date(2024, 6, 25),
    summary="Midsummer",
    categories=["holiday", "summer"],
    transparent=True,
)

doc.add_event(
    uid="planning-2024@example.com",
    dtstamp=datetime(2024, 6, 26, 12, 0, tzinfo=UTC),
    start=datetime(2024, 7, 1, 9, 0, tzinfo=UTC),
    end=datetime(2024, 7, 1, 10, 30, tzinfo=UTC),
    summary="Planning; Q3 roadmap, budget",
    description="""Agenda:
1. Review last quarter
2. Roadmap for Q3, including the calendar export and the new sync service
3. Budget

Bring your notes. Coffee is provided; lunch is not.""",
    location="Meeting room \"Fjord\", 2nd floor",
    geo=(59.9139, 10.7522),
)

doc.add_event(
    uid="sankthans-2024@example.com",
    dtstamp=datetime(2024, 6, 26, 12, 0, tzinfo=UTC),
    start=datetime(2024, 6, 23, 20, 0),
    summary="Sankthansaften 🔥 bål på stranda, ta med grillmat og godt humør til hele gjengen",
)

# Write the example
output = str(__import__("pathlib").Path(__file__).parent / "hello.ics")
nbytes = doc.write(output)
print(f"Generated {output} ({nbytes} bytes)")

# Also print the raw content so you can see the folding
print()
print("=" * 60)
print("RAW .ics FILE CONTENTS:")
print("=" * 60)
print()
print(doc.to_bytes().decode("utf-8").replace("\r\n", "\n"))

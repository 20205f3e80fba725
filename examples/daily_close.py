"""
Example: Recording a day of payments and closing it

Uses the single-device JSON file store, prints the per-agent summary and
the closing report, and writes the PDF report for the day.
"""

import asyncio

from dotenv import load_dotenv

load_dotenv()

from dailyledger import Config, DailyLedger, ValidationError  # noqa: E402


async def always_yes(context):
    print(f"  Confirming: {context.description}")
    return True


async def main():
    print("=== dailyledger Daily Close Example ===\n")

    config = Config.from_env(storage_backend="file", storage_path="example-ledger.json")

    async with DailyLedger(config, confirm_callback=always_yes) as app:
        rates = app.rates
        print(f"Rates ({rates.status.value}): official={rates.official} parallel={rates.parallel}\n")

        # ========================================
        # Record some payments through the form
        # ========================================
        print("--- Recording Payments ---")
        form = app.form()
        for agent, amount, reference in [
            ("Agente 1", "1500.00", "4821"),
            ("Agente 1", "250.50", "4822"),
            ("Agente 4", "980", "7310"),
            ("Agente 4", "100", "4821"),  # duplicate reference
            ("Agente 7", "75", "12"),  # reference too short
        ]:
            form.set_agent(agent)
            form.set_amount(amount)
            form.set_reference(reference)
            await form.submit()
            print(f"  {reference}: {form.success_message or form.error}")

        # ========================================
        # Views
        # ========================================
        ledger = app.ledger
        stats = ledger.stats()
        print(f"\nTotal: {stats.total}  Fee: {stats.profit}  Net: {stats.net_remainder}")

        print("\n--- Summary ---")
        for agent, summary in ledger.agent_summary():
            print(f"  {agent}: {summary.total} ({summary.count} payments)")

        try:
            ledger.validate("Agente 9", "10", "7310")
        except ValidationError as e:
            print(f"\nValidation check: {e}")

        # ========================================
        # Report and close
        # ========================================
        path = app.export_report()
        print(f"\nPDF report written to {path}")

        report = await ledger.close_day()
        print("\n--- Closing Report ---")
        print(report)


if __name__ == "__main__":
    asyncio.run(main())

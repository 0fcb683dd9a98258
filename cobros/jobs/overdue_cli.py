# python -m cobros.jobs.overdue_cli
import logging

from dotenv import load_dotenv
load_dotenv()

from cobros.jobs.overdue import mark_overdue_installments_job  # noqa: E402

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    updated = mark_overdue_installments_job()
    print(f"Cuotas vencidas marcadas: {updated}")

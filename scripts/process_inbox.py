import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from inbox_assistant.app.inbox import load_mock_inbox
from inbox_assistant.config.paths import DATA_DIR
from inbox_assistant.llm.gateway import OpenAIGateway
from inbox_assistant.pipeline.processor import process_inbox
from inbox_assistant.storage.records import open_storage


def main() -> None:
    parser = argparse.ArgumentParser(description="Categorize and extract action items for one user's inbox.")
    parser.add_argument("user", help="User email address (storage key)")
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR)
    parser.add_argument("--load-mock", action="store_true", help="Load the bundled mock inbox first")
    args = parser.parse_args()

    storage = open_storage(args.data_dir)
    user_id = args.user.strip().lower()

    if args.load_mock:
        count = load_mock_inbox(user_id, storage)
        print(f"[load] Loaded {count} mock emails")

    summary = process_inbox(user_id, storage, OpenAIGateway())
    print(f"[run] processed={summary.processed} errors={summary.errors} persist_errors={summary.persist_errors}")
    for result in summary.results:
        print(json.dumps(result.to_dict(), ensure_ascii=False))


if __name__ == "__main__":
    main()

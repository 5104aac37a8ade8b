from collections import Counter
from cleancity import create_app
from cleancity.storage import get_storage

def inspect():
    app = create_app()

    with app.app_context():
        storage = get_storage()
        users = storage.get_all_users()
        reports = storage.get_all_reports()
        codes = storage.get_all_admin_secret_codes()

        print("--- Users ---")
        print(f"Total: {len(users)}")
        for (city, role), count in sorted(Counter((u.city, u.role) for u in users).items()):
            print(f"  {city} / {role}: {count}")

        print("\n--- Reports ---")
        print(f"Total: {len(reports)}")
        for status, count in sorted(Counter(r.status for r in reports).items()):
            print(f"  {status}: {count}")

        print("\n--- Admin Secret Codes ---")
        for c in codes:
            print(f"  {c.code} ({c.city}) used={c.is_used}")

if __name__ == '__main__':
    inspect()

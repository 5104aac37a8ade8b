import sys
from cleancity import create_app
from cleancity.errors import DuplicateError
from cleancity.storage import get_storage

def main(argv):
    if len(argv) != 3:
        print("Usage: python scripts/create_admin_code.py <CODE> <CITY>")
        return 1

    code, city = argv[1], argv[2]
    app = create_app()

    with app.app_context():
        storage = get_storage()
        try:
            secret = storage.create_admin_secret_code(code, city)
        except DuplicateError:
            print(f"Admin code '{code}' already exists.")
            return 1
        print(f"Admin code '{secret.code}' created for {secret.city}.")
    return 0

if __name__ == '__main__':
    sys.exit(main(sys.argv))

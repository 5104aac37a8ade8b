import os
from cleancity import create_app

app = create_app(os.environ.get('CLEANCITY_ENV', 'default'))

if __name__ == '__main__':
    port = app.config['PORT']
    print("=" * 50)
    print(f"CleanCity backend running on http://localhost:{port}")
    print("=" * 50)
    print("Available routes:")
    seen = set()
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: (str(r.rule), str(list(r.methods)))):
        if rule.endpoint == 'static':
            continue
        methods = ','.join(sorted(m for m in rule.methods if m not in ('HEAD', 'OPTIONS')))
        entry = f"  - {methods} {rule.rule}"
        if entry not in seen:
            print(entry)
            seen.add(entry)
    print("=" * 50)
    try:
        app.run(debug=app.config['DEBUG'], port=port, host='0.0.0.0')
    except OSError as e:
        print('Failed to start server:', e)
        print('If you see a socket/permission error, pick a different port and set CLEANCITY_PORT or free the port.')

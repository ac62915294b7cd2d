from piscan.app.factory import create_app

app = create_app()


def main() -> None:
    app.run(host=app.config["APP_HOST"], port=app.config["APP_PORT"], debug=app.config.get("DEBUG", False))


if __name__ == "__main__":
    main()

import os

from flask import Flask, redirect, url_for

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from stark_routes import stark_bp, init_stark_bp

# ZKP_STUDY_DB 가 없으면 메모리 DB
DB_PATH = os.environ.get("ZKP_STUDY_DB")
DB = TinyDB(DB_PATH) if DB_PATH else TinyDB(storage=MemoryStorage)

app = Flask(__name__)
app.secret_key = os.environ.get("ZKP_STUDY_SECRET", "key")

stark_db = DB.table("stark")
init_stark_bp(stark_db)
app.register_blueprint(stark_bp)


@app.route("/")
def main():
    return redirect(url_for("stark.ood_page"))


if __name__ == "__main__":
    app.run(debug=True)

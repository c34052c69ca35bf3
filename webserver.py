# webserver.py
from flask import Flask, jsonify
import os
import threading

app = Flask(__name__)


@app.route("/")
def home():
    return "Bot is running!", 200


@app.route("/health")
def health():
    return jsonify(status="ok"), 200


def run():
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")))


def start():
    threading.Thread(target=run, daemon=True).start()

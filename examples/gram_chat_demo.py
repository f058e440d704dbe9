"""Minimal demonstration of a GramGPT chat turn."""

from gram_core.api.service import list_history, run_chat

if __name__ == "__main__":
    for question in ["আজকের আবহাওয়া কেমন?", "ধানক্ষেতের একটি ছবি আঁকো"]:
        reply = run_chat(question)
        print("User:", question)
        if not reply["ok"]:
            print("Error:", reply["error"]["message"])
            continue
        for part in reply["model_message"]["parts"]:
            if "text" in part:
                print("GramGPT:", part["text"])
            else:
                print("GramGPT: [image %s]" % part["inlineData"]["mimeType"])
    print("History items:", len(list_history()))

"""Check installed mods against the mod portal and install newer releases."""
#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Example: Harvesting files from an unreliable FTP server

This example shows a job that walks a directory tree and downloads every
file in it through a ResilientFTP session. Timeouts and dropped
connections rebuild the session in place, so the loop below never needs to
know where it was.

Set HARVESTLIB_ENV=development to reuse files already downloaded.
"""

from harvestlib import config
from harvestlib.processor import Processor

REMOTE_DIRS = ["pub", "2024"]


class MirrorJob(Processor):
    """Download every file found in REMOTE_DIRS."""

    def run(self):
        print("=" * 60)
        print("Resilient FTP Example")
        print("=" * 60)

        with self.ftp(root_path=self.output_dir) as ftp:
            ftp.login()
            print(f"\nLogged in to {config.get('FTP_HOST')}")

            for dirname in REMOTE_DIRS:
                ftp.cwd(dirname)
            print(f"Working directory: {ftp.last_dir}")

            names = ftp.nlst()
            print(f"Found {len(names)} entries")

            for name in names:
                with ftp.download(name) as fh:
                    size = len(fh.read())
                self.assert_(f"{name} is empty", size > 0)
                print(f"  {name}: {size} bytes")

        print("\n" + "=" * 60)
        print(f"Example complete at {self.now()}")
        print("=" * 60)


def main():
    MirrorJob().run()


if __name__ == "__main__":
    main()

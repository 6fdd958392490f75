"""
Cancel uploads and extra form fields
"""
import asyncio
import itertools
from mediaqueue import UploadQueue, QueueConfig


async def main():
    counter = itertools.count(1)

    # Extra fields are evaluated for every upload attempt
    config = QueueConfig(
        upload_url="https://example.com/api/audio/upload",
        file_field_name="audio",
        allowed_extensions=(".mp3", ".wav"),
        allowed_mime_types=("audio/mpeg", "audio/wav"),
        extra_data=lambda: {"title": f"Track {next(counter)}"}
    )

    async with UploadQueue(config) as queue:
        queue.add_files(["one.mp3", "two.wav", "three.mp3"])

        run = asyncio.create_task(queue.start_upload())
        await asyncio.sleep(1)

        # Stop one file; the rest of the run continues
        queue.cancel_current()

        # Or stop everything; the run resolves to None
        queue.cancel_all()
        if await run is None:
            print("Cancelled")

        counts = queue.get_status_counts()
        print(f"Pending: {counts.pending}, uploaded: {counts.success}")


if __name__ == "__main__":
    asyncio.run(main())

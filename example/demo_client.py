# demo_client.py
# Run the demo server first:  python -m jsonrpc_http.main
import asyncio

from pydantic import BaseModel

from jsonrpc_http import JSONRPCError, RPCClient, RPCRequest
from jsonrpc_http.config import DEFAULT_ENDPOINT


class User(BaseModel):
    ID: int
    Name: str
    Role: str


async def main():
    async with RPCClient(DEFAULT_ENDPOINT) as client:
        # Call "add"
        add_resp = await client.call("add", 5, 3)
        print("add(5,3) =", add_resp.get_float())

        # Call "getUser" with named params
        user = await client.call_for(User, "getUser", {"userId": 101})
        print("getUser:", user)

        # Call "greet"
        greeting = await client.call_for(str, "greet", {"name": "Subhrajyoti"})
        print("greet:", greeting)

        # Batch: ids are renumbered 0..n-1, answers matched by id
        responses = await client.call_batch([
            RPCRequest.new("add", 1, 2),
            RPCRequest.new("divide", 10, 0),
            RPCRequest.new("greet", {"name": "batch"}),
        ])
        for req_id, resp in sorted(responses.as_map().items()):
            print(f"batch[{req_id}]:", resp.error or resp.result)
        print("batch has error:", responses.has_error())

        # Try calling an unknown method
        try:
            await client.call("unknownMethod")
        except JSONRPCError as e:
            print("Error:", e)


if __name__ == "__main__":
    asyncio.run(main())
